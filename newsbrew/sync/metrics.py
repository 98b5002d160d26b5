"""Metrics collection for sync cycles."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock


_metrics_instance: "SyncMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class SyncMetrics:
    """Thread-safe counters for sync cycles.

    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    items_by_source: Counter[str] = field(default_factory=Counter)
    failures_by_source_error: Counter[tuple[str, str]] = field(
        default_factory=Counter
    )
    duration_by_source: dict[str, float] = field(default_factory=dict)
    total_items: int = 0
    total_failures: int = 0
    total_cycles: int = 0

    @classmethod
    def get_instance(cls) -> "SyncMetrics":
        """Get the singleton instance (thread-safe)."""
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_items(self, source: str, count: int) -> None:
        """Record items stored for a source."""
        with self._lock:
            self.items_by_source[source] += count
            self.total_items += count

    def record_failure(self, source: str, error_class: str) -> None:
        """Record a failed source fetch."""
        with self._lock:
            self.failures_by_source_error[(source, error_class)] += 1
            self.total_failures += 1

    def record_duration(self, source: str, duration_ms: float) -> None:
        """Record the fetch duration for a source."""
        with self._lock:
            self.duration_by_source[source] = duration_ms

    def record_cycle(self) -> None:
        """Record a completed sync cycle."""
        with self._lock:
            self.total_cycles += 1

    def get_failures_total(self, source: str | None = None) -> int:
        """Get total failures, optionally for one source."""
        with self._lock:
            if source is None:
                return self.total_failures
            return sum(
                count
                for (name, _), count in self.failures_by_source_error.items()
                if name == source
            )

    def to_dict(self) -> dict[str, object]:
        """Snapshot the counters for logging."""
        with self._lock:
            return {
                "total_items": self.total_items,
                "total_failures": self.total_failures,
                "total_cycles": self.total_cycles,
                "items_by_source": dict(self.items_by_source),
                "failures_by_source": {
                    f"{name}:{error_class}": count
                    for (name, error_class), count in sorted(
                        self.failures_by_source_error.items()
                    )
                },
            }
