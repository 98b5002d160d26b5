"""Values produced by the fetch layer: error classes, results, retry policy."""

import json
import random
from enum import Enum
from typing import Annotated, Any

import httpx
from pydantic import Field

from newsbrew.data_model import StrictBaseModel


class FetchErrorClass(str, Enum):
    """Why a fetch failed.

    Adapters map ``DEADLINE_EXCEEDED`` to a timeout and everything else to a
    fetch failure; the retry policy only looks at ``retryable``.
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    UNKNOWN = "UNKNOWN"

    @property
    def retryable(self) -> bool:
        """Whether another attempt could plausibly succeed."""
        return self in _TRANSIENT


_TRANSIENT = frozenset(
    {
        FetchErrorClass.NETWORK_TIMEOUT,
        FetchErrorClass.CONNECTION_ERROR,
        FetchErrorClass.HTTP_5XX,
        FetchErrorClass.RATE_LIMITED,
    }
)


class FetchError(StrictBaseModel):
    """A classified failure. Returned inside results, never raised."""

    error_class: FetchErrorClass
    message: Annotated[str, Field(min_length=1)]
    status_code: int | None = Field(default=None, description="Response status, if any")
    retry_after: int | None = Field(
        default=None, description="Server-requested wait in seconds (429 only)"
    )


class FetchResult(StrictBaseModel):
    """Outcome of one ``HttpFetcher.fetch`` call, retries included.

    ``status_code`` is 0 when no response arrived at all.
    """

    status_code: int = Field(ge=0, le=599)
    final_url: Annotated[str, Field(min_length=1, description="URL after redirects")]
    headers: dict[str, str] = Field(default_factory=dict)
    body_bytes: bytes = b""
    error: FetchError | None = None

    @property
    def is_success(self) -> bool:
        """2xx response with no recorded error."""
        return self.error is None and httpx.codes.is_success(self.status_code)

    @property
    def body_size(self) -> int:
        """Length of the body in bytes."""
        return len(self.body_bytes)

    def json_body(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body_bytes)


class RetryPolicy(StrictBaseModel):
    """Exponential backoff with proportional jitter.

    The n-th retry (0-indexed) waits ``base_delay_ms * exponential_base**n``
    capped at ``max_delay_ms``, plus up to ``jitter_factor`` of that.
    """

    max_retries: Annotated[int, Field(ge=0, le=10)] = 2
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 500
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 10000
    exponential_base: Annotated[float, Field(ge=1.0, le=5.0)] = 2.0
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1

    def should_retry(self, error: FetchError, attempt: int) -> bool:
        """Decide whether the attempt that just failed gets a successor.

        Args:
            error: Failure of the attempt.
            attempt: Index of that attempt, starting at 0.
        """
        return attempt < self.max_retries and error.error_class.retryable

    def get_delay_ms(self, attempt: int) -> int:
        """Backoff before the retry that follows ``attempt``."""
        delay = min(self.base_delay_ms * self.exponential_base**attempt, self.max_delay_ms)
        return int(delay * (1 + self.jitter_factor * random.random()))  # noqa: S311


class ResponseSizeExceededError(Exception):
    """A streamed body grew past the configured limit."""
