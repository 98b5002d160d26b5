"""Counters kept by the state store for the current process."""

from collections import Counter
from dataclasses import dataclass, field
from typing import ClassVar

from newsbrew.store.models import ItemEventType


@dataclass
class OperationTimings:
    """Commit and rollback tallies for one kind of transaction."""

    committed: int = 0
    rolled_back: int = 0
    total_ms: float = 0.0


@dataclass
class StoreMetrics:
    """Upsert outcomes and transaction timings, keyed by operation name."""

    upserts: Counter[ItemEventType] = field(default_factory=Counter)
    operations: dict[str, OperationTimings] = field(default_factory=dict)

    _instance: ClassVar["StoreMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "StoreMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next caller starts from zero."""
        cls._instance = None

    def record_upsert(self, event_type: ItemEventType) -> None:
        self.upserts[event_type] += 1

    def _timings(self, operation: str) -> OperationTimings:
        return self.operations.setdefault(operation, OperationTimings())

    def record_commit(self, operation: str, duration_ms: float) -> None:
        timings = self._timings(operation)
        timings.committed += 1
        timings.total_ms += duration_ms

    def record_rollback(self, operation: str) -> None:
        self._timings(operation).rolled_back += 1

    @property
    def commits(self) -> int:
        """Committed transactions across all operations."""
        return sum(t.committed for t in self.operations.values())

    @property
    def rollbacks(self) -> int:
        return sum(t.rolled_back for t in self.operations.values())


@dataclass
class TransactionContext:
    """Bookkeeping for one open transaction."""

    tx_id: str
    operation: str
    started_ns: int
    affected_rows: int = 0

    def add_affected_rows(self, rows: int) -> None:
        # sqlite reports -1 for statements that touch no table rows
        self.affected_rows += max(rows, 0)
