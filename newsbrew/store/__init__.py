"""SQLite state store for sources, items, rules and digests."""

from newsbrew.store.errors import (
    ConnectionError,
    InvalidRuleError,
    ItemNotFoundError,
    MigrationError,
    SourceNotFoundError,
    StateStoreError,
)
from newsbrew.store.metrics import StoreMetrics
from newsbrew.store.migrations import CURRENT_VERSION, MigrationManager
from newsbrew.store.models import (
    DedupEdge,
    ItemEventType,
    ItemFilter,
    ItemOrder,
    Rule,
    RuleKind,
    SourceRecord,
    UpsertResult,
)
from newsbrew.store.store import StateStore


__all__ = [
    "CURRENT_VERSION",
    "ConnectionError",
    "DedupEdge",
    "InvalidRuleError",
    "ItemEventType",
    "ItemFilter",
    "ItemNotFoundError",
    "ItemOrder",
    "MigrationError",
    "MigrationManager",
    "Rule",
    "RuleKind",
    "SourceNotFoundError",
    "SourceRecord",
    "StateStore",
    "StateStoreError",
    "StoreMetrics",
    "UpsertResult",
]
