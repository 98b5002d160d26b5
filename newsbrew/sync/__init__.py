"""Ingestion: run adapters, convert their output and persist it."""

from newsbrew.sync.convert import (
    PRIORITY_SCORES,
    build_tags,
    convert_item,
    priority_to_score,
)
from newsbrew.sync.metrics import SyncMetrics
from newsbrew.sync.models import SourceSyncResult, SyncReport
from newsbrew.sync.report import format_sync_report
from newsbrew.sync.runner import SyncRunner


__all__ = [
    "PRIORITY_SCORES",
    "SourceSyncResult",
    "SyncMetrics",
    "SyncReport",
    "SyncRunner",
    "build_tags",
    "convert_item",
    "format_sync_report",
    "priority_to_score",
]
