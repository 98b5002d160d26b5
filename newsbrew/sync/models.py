"""Result models for sync cycles."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class SourceSyncResult:
    """Outcome of syncing one source.

    ``error`` is None for a successful fetch, even one returning no items.
    """

    name: str
    key: str
    items_fetched: int = 0
    items_inserted: int = 0
    items_updated: int = 0
    items_unchanged: int = 0
    items_failed: int = 0
    error: str | None = None
    error_class: str | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        """Check if the source fetched without error."""
        return self.error is None


@dataclass
class SyncReport:
    """Aggregated outcome of one sync cycle."""

    run_id: str
    started_at: datetime
    finished_at: datetime
    results: list[SourceSyncResult] = field(default_factory=list)

    @property
    def total_inserted(self) -> int:
        """Items newly stored across all sources."""
        return sum(r.items_inserted for r in self.results)

    @property
    def total_updated(self) -> int:
        """Items whose content changed across all sources."""
        return sum(r.items_updated for r in self.results)

    @property
    def total_unchanged(self) -> int:
        """Items re-ingested without change."""
        return sum(r.items_unchanged for r in self.results)

    @property
    def total_failed_items(self) -> int:
        """Items that could not be converted or stored."""
        return sum(r.items_failed for r in self.results)

    @property
    def sources_succeeded(self) -> int:
        """Number of sources that fetched successfully."""
        return sum(1 for r in self.results if r.success)

    @property
    def sources_failed(self) -> int:
        """Number of sources that failed or timed out."""
        return sum(1 for r in self.results if not r.success)

    @property
    def success(self) -> bool:
        """Check if any source succeeded."""
        return self.sources_succeeded > 0

    @property
    def duration_ms(self) -> float:
        """Get total duration in milliseconds."""
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def get(self, key: str) -> SourceSyncResult | None:
        """Look up a source result by configured key."""
        for result in self.results:
            if result.key == key:
                return result
        return None
