"""Per-source HTTP counters for sync diagnostics."""

import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, ClassVar

from newsbrew.fetch.models import FetchErrorClass


@dataclass
class SourceFetchStats:
    """Traffic seen for one source during the process lifetime."""

    requests: int = 0
    bytes_received: int = 0
    retries: int = 0
    duration_ms: float = 0.0
    statuses: Counter[int] = field(default_factory=Counter)
    failures: Counter[str] = field(default_factory=Counter)

    def copy(self) -> "SourceFetchStats":
        """Detached snapshot."""
        return SourceFetchStats(
            requests=self.requests,
            bytes_received=self.bytes_received,
            retries=self.retries,
            duration_ms=self.duration_ms,
            statuses=Counter(self.statuses),
            failures=Counter(self.failures),
        )


class FetchMetrics:
    """Process-wide fetch counters keyed by source id.

    Adapters fetch from worker threads (and Hacker News fans out further),
    so every update holds the instance lock.
    """

    _instance: ClassVar["FetchMetrics | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sources: dict[str, SourceFetchStats] = {}

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get the shared instance."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop all counters (used between tests)."""
        with cls._instance_lock:
            cls._instance = None

    def _stats(self, source_id: str) -> SourceFetchStats:
        return self._sources.setdefault(source_id, SourceFetchStats())

    def record_request(self, source_id: str, status_code: int, bytes_received: int) -> None:
        """Count one completed response and its body size."""
        with self._lock:
            stats = self._stats(source_id)
            stats.requests += 1
            stats.bytes_received += bytes_received
            stats.statuses[status_code] += 1

    def record_retry(self, source_id: str) -> None:
        """Count a retry about to be attempted."""
        with self._lock:
            self._stats(source_id).retries += 1

    def record_failure(self, source_id: str, error_class: FetchErrorClass) -> None:
        """Count a fetch that still failed after its last attempt."""
        with self._lock:
            self._stats(source_id).failures[error_class.value] += 1

    def record_duration(self, source_id: str, duration_ms: float) -> None:
        """Add wall time spent in one fetch, retries included."""
        with self._lock:
            self._stats(source_id).duration_ms += duration_ms

    def for_source(self, source_id: str) -> SourceFetchStats:
        """Snapshot of one source (zeros if it never fetched)."""
        with self._lock:
            stats = self._sources.get(source_id)
            return stats.copy() if stats else SourceFetchStats()

    @property
    def total_requests(self) -> int:
        """Responses received across all sources."""
        with self._lock:
            return sum(s.requests for s in self._sources.values())

    @property
    def total_bytes(self) -> int:
        """Body bytes received across all sources."""
        with self._lock:
            return sum(s.bytes_received for s in self._sources.values())

    def to_dict(self) -> dict[str, Any]:
        """Nested summary suitable for a log event."""
        with self._lock:
            return {
                source_id: {
                    "requests": stats.requests,
                    "bytes": stats.bytes_received,
                    "retries": stats.retries,
                    "duration_ms": round(stats.duration_ms, 2),
                    "statuses": dict(stats.statuses),
                    "failures": dict(stats.failures),
                }
                for source_id, stats in sorted(self._sources.items())
            }
