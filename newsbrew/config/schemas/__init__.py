"""Configuration schemas."""

from newsbrew.config.schemas.app import AppConfig, SyncConfig
from newsbrew.config.schemas.curation import (
    CurationConfig,
    DedupConfig,
    DiversityLimits,
    ScoringConfig,
)
from newsbrew.config.schemas.sources import SourceDriver, SourceSpec


__all__ = [
    "AppConfig",
    "CurationConfig",
    "DedupConfig",
    "DiversityLimits",
    "ScoringConfig",
    "SourceDriver",
    "SourceSpec",
    "SyncConfig",
]
