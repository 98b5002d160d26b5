"""Source adapter interface and shared helpers."""

import json
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog

from newsbrew.adapters.errors import (
    AdapterError,
    AdapterErrorClass,
    ErrorRecord,
    ParseError,
)
from newsbrew.data_model import Engagement
from newsbrew.fetch import FetchErrorClass, HttpFetcher


logger = structlog.get_logger()


class Priority(str, Enum):
    """Coarse source-reported priority of an item."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def priority_from_thresholds(
    value: float,
    urgent: float,
    high: float,
    medium: float,
    inclusive: bool = False,
) -> Priority:
    """Map a numeric signal onto a priority.

    Args:
        value: Signal such as points or stars.
        urgent: Lower bound for URGENT.
        high: Lower bound for HIGH.
        medium: Lower bound for MEDIUM.
        inclusive: Whether reaching a bound is enough (default: must exceed).

    Returns:
        The matching priority, LOW when below every bound.
    """
    for bound, priority in (
        (urgent, Priority.URGENT),
        (high, Priority.HIGH),
        (medium, Priority.MEDIUM),
    ):
        if value > bound or (inclusive and value == bound):
            return priority
    return Priority.LOW


def truncate(text: str, limit: int) -> str:
    """Shorten text to ``limit`` characters, marking the cut with ``...``."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def parse_timestamp(value: str | float | None) -> datetime | None:
    """Parse an ISO-8601 string or a Unix timestamp into UTC.

    Returns:
        Parsed timestamp, or None when missing or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, tz=UTC)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclass(frozen=True)
class RawItem:
    """Item as returned by a source adapter, before canonicalization."""

    title: str
    url: str = ""
    summary: str = ""
    body: str = ""
    published_at: datetime | None = None
    priority: Priority = Priority.LOW
    category: str = ""
    tags: tuple[str, ...] = ()
    language: str = ""
    engagement: Engagement | None = None


@dataclass(frozen=True)
class AdapterConfig:
    """Per-source runtime configuration.

    ``settings`` is an open key/value map; adapters read what they know
    (commonly ``max``) and apply their own defaults otherwise.
    """

    enabled: bool = True
    settings: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class FetchContext:
    """Shared deadline and cancellation signal for one sync cycle.

    Attributes:
        now: Reference timestamp for the cycle.
        deadline: Absolute ``time.monotonic()`` instant, or None for no limit.
        cancelled: Set when the cycle abandons in-flight adapters.
    """

    now: datetime = field(default_factory=lambda: datetime.now(UTC))
    deadline: float | None = None
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(
        cls, timeout_seconds: float, now: datetime | None = None
    ) -> "FetchContext":
        """Create a context whose deadline is ``timeout_seconds`` from now."""
        return cls(
            now=now or datetime.now(UTC),
            deadline=time.monotonic() + timeout_seconds,
        )

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        """Whether the cycle was cancelled or its deadline passed."""
        if self.cancelled.is_set():
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def raise_if_expired(self, source_name: str | None = None) -> None:
        """Abort the current adapter once the cycle is over.

        Raises:
            AdapterError: With TIMEOUT class if expired.
        """
        if self.expired:
            raise AdapterError(
                AdapterErrorClass.TIMEOUT,
                "Sync deadline exceeded",
                source_name=source_name,
            )


@dataclass(frozen=True)
class AdapterResult:
    """Result of one adapter fetch."""

    items: list[RawItem] = field(default_factory=list)
    error: ErrorRecord | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the fetch succeeded (possibly with zero items)."""
        return self.error is None

    @property
    def items_count(self) -> int:
        """Get number of items returned."""
        return len(self.items)


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for source adapters, one per upstream."""

    @property
    def name(self) -> str:
        """Display name of the source."""
        ...

    @property
    def icon(self) -> str:
        """Display icon of the source."""
        ...

    @property
    def kind(self) -> str:
        """Driver kind used for source registration."""
        ...

    def fetch(self, ctx: FetchContext, config: AdapterConfig) -> AdapterResult:
        """Fetch a batch of raw items.

        Args:
            ctx: Deadline and cancellation context.
            config: Per-source runtime configuration.

        Returns:
            AdapterResult with items, or with an error record on failure.
        """
        ...


class BaseAdapter(ABC):
    """Abstract base class for adapters backed by the shared HTTP client.

    Subclasses implement ``_collect`` and may raise ``AdapterError``;
    ``fetch`` turns every failure into a failed ``AdapterResult`` so that
    nothing propagates across the sync batch.
    """

    DEFAULT_NAME: str = ""
    DEFAULT_ICON: str = ""
    KIND: str = ""
    DEFAULT_MAX: int = 10
    HOMEPAGE: str = ""

    def __init__(
        self,
        http_client: HttpFetcher,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            name: Display name override.
            icon: Icon override.
        """
        self._http = http_client
        self._name = name or self.DEFAULT_NAME
        self._icon = icon if icon is not None else self.DEFAULT_ICON
        self._log = logger.bind(component="adapter", source=self._name, kind=self.KIND)

    @property
    def name(self) -> str:
        """Display name of the source."""
        return self._name

    @property
    def icon(self) -> str:
        """Display icon of the source."""
        return self._icon

    @property
    def kind(self) -> str:
        """Driver kind used for source registration."""
        return self.KIND

    @property
    def url(self) -> str:
        """Upstream homepage recorded on source registration."""
        return self.HOMEPAGE

    def fetch(self, ctx: FetchContext, config: AdapterConfig) -> AdapterResult:
        """Fetch items, converting failures into an error result."""
        if not config.enabled:
            return AdapterResult()

        max_items = self.max_items(config.settings)
        try:
            ctx.raise_if_expired(self._name)
            items = self._collect(ctx, max_items, config.settings)
        except AdapterError as e:
            if e.source_name is None:
                e.source_name = self._name
            self._log.warning(
                "adapter_failed",
                error_class=e.error_class.value,
                error=e.message,
            )
            return AdapterResult(error=ErrorRecord.from_exception(e))
        except Exception as e:  # noqa: BLE001
            self._log.warning(
                "adapter_failed",
                error_class=AdapterErrorClass.FETCH.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return AdapterResult(
                error=ErrorRecord(
                    error_class=AdapterErrorClass.FETCH,
                    message=f"{type(e).__name__}: {e}",
                    source_name=self._name,
                )
            )

        return AdapterResult(items=items[:max_items])

    @abstractmethod
    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        """Fetch and parse raw items.

        Args:
            ctx: Deadline and cancellation context.
            max_items: Maximum number of items to return.
            settings: Open per-source settings.

        Returns:
            Raw items, best first.

        Raises:
            AdapterError: On fetch, parse or schema failures.
        """

    def max_items(self, settings: Mapping[str, Any]) -> int:
        """Read the ``max`` setting, falling back to the adapter default."""
        value = settings.get("max")
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return self.DEFAULT_MAX
        return value

    def _fetch_bytes(
        self,
        ctx: FetchContext,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET a URL through the shared client within the cycle deadline.

        Raises:
            AdapterError: FETCH or TIMEOUT on failure.
        """
        ctx.raise_if_expired(self._name)
        result = self._http.fetch(
            source_id=self._name,
            url=url,
            extra_headers=headers,
            params=params,
            deadline=ctx.deadline,
        )
        if result.error is not None:
            error_class = (
                AdapterErrorClass.TIMEOUT
                if result.error.error_class == FetchErrorClass.DEADLINE_EXCEEDED
                else AdapterErrorClass.FETCH
            )
            raise AdapterError(
                error_class,
                result.error.message,
                source_name=self._name,
                details={
                    "status_code": result.error.status_code,
                    "fetch_error": result.error.error_class.value,
                },
            )
        return result.body_bytes

    def _fetch_json(
        self,
        ctx: FetchContext,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET a URL and decode the body as JSON.

        Raises:
            AdapterError: On fetch failure.
            ParseError: If the body is not JSON.
        """
        body = self._fetch_bytes(ctx, url, params=params, headers=headers)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(
                f"Invalid JSON: {e}",
                source_name=self._name,
                context=body[:200].decode("utf-8", errors="replace"),
            ) from e
