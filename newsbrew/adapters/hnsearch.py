"""Hacker News keyword search adapter (Algolia API)."""

from collections.abc import Mapping, Sequence
from typing import Any

from newsbrew.adapters.base import (
    BaseAdapter,
    FetchContext,
    RawItem,
    parse_timestamp,
    priority_from_thresholds,
)
from newsbrew.adapters.errors import AdapterError, AdapterErrorClass
from newsbrew.data_model import Engagement
from newsbrew.fetch import HttpFetcher


SEARCH_URL = "https://hn.algolia.com/api/v1/search"
DISCUSSION_URL = "https://news.ycombinator.com/item?id={id}"

DEFAULT_QUERIES: tuple[str, ...] = ("LLM", "AI agents", "Claude")


class HnSearchAdapter(BaseAdapter):
    """Searches Hacker News stories for a set of keyword queries.

    Results of all queries are merged, deduplicated by story id and sorted
    by points. A failing query is skipped; the source fails only when every
    query failed.
    """

    DEFAULT_NAME = "HN Search"
    DEFAULT_ICON = "🔍"
    KIND = "hnsearch"
    DEFAULT_MAX = 5
    HOMEPAGE = "https://hn.algolia.com"

    def __init__(
        self,
        http_client: HttpFetcher,
        queries: Sequence[str] | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            queries: Search queries (default: a small AI-focused set).
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._queries = tuple(queries) if queries else DEFAULT_QUERIES

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        min_points = settings.get("min_points", 10)
        seen: set[str] = set()
        scored: list[tuple[int, RawItem]] = []
        failures = 0
        last_error: AdapterError | None = None

        for query in self._queries:
            try:
                payload = self._fetch_json(
                    ctx,
                    SEARCH_URL,
                    params={
                        "query": query,
                        "tags": "story",
                        "hitsPerPage": str(max_items * 2),
                        "numericFilters": f"points>{min_points}",
                    },
                )
            except AdapterError as e:
                if e.error_class == AdapterErrorClass.TIMEOUT:
                    raise
                self._log.info("query_failed", query=query, error=e.message)
                failures += 1
                last_error = e
                continue

            hits = payload.get("hits", []) if isinstance(payload, dict) else []
            for hit in hits:
                object_id = str(hit.get("objectID", ""))
                if not object_id or object_id in seen or not hit.get("title"):
                    continue
                seen.add(object_id)
                points = int(hit.get("points") or 0)
                scored.append((points, self._to_item(hit, points)))

        if last_error is not None and failures == len(self._queries):
            raise last_error

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [item for _, item in scored[:max_items]]

    def _to_item(self, hit: dict[str, Any], points: int) -> RawItem:
        comments = int(hit.get("num_comments") or 0)
        discussion = DISCUSSION_URL.format(id=hit["objectID"])
        return RawItem(
            title=str(hit["title"]),
            url=hit.get("url") or discussion,
            summary=f"{points} points by {hit.get('author', '')} • {comments} comments",
            published_at=parse_timestamp(hit.get("created_at")),
            priority=priority_from_thresholds(points, urgent=200, high=100, medium=30),
            category="hackernews",
            engagement=Engagement(points=points, comments=comments),
        )
