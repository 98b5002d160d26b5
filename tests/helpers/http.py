"""Fake HTTP client responses for adapter tests."""

import json
from collections.abc import Callable, Mapping
from typing import Any
from unittest.mock import MagicMock

from newsbrew.fetch import FetchError, FetchErrorClass, FetchResult, HttpFetcher


def ok(body: bytes | str, url: str = "https://example.test/") -> FetchResult:
    """Successful fetch result carrying a body."""
    data = body.encode("utf-8") if isinstance(body, str) else body
    return FetchResult(status_code=200, final_url=url, body_bytes=data)


def ok_json(payload: Any, url: str = "https://example.test/") -> FetchResult:
    """Successful fetch result carrying a JSON body."""
    return ok(json.dumps(payload), url)


def failed(
    error_class: FetchErrorClass = FetchErrorClass.HTTP_5XX,
    status_code: int = 503,
    url: str = "https://example.test/",
) -> FetchResult:
    """Failed fetch result."""
    return FetchResult(
        status_code=status_code,
        final_url=url,
        error=FetchError(
            error_class=error_class,
            message=f"{error_class.value} failure",
            status_code=status_code or None,
        ),
    )


def fake_http(
    routes: Mapping[str, FetchResult] | Callable[..., FetchResult],
) -> MagicMock:
    """Build an HttpFetcher double answering by URL (or via a callable)."""
    client = MagicMock(spec=HttpFetcher)
    if callable(routes):
        client.fetch.side_effect = routes
        return client

    def respond(source_id: str, url: str, **_: Any) -> FetchResult:
        if url not in routes:
            return failed(FetchErrorClass.HTTP_4XX, 404, url)
        return routes[url]

    client.fetch.side_effect = respond
    return client
