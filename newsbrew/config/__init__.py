"""Configuration loading and schemas."""

from newsbrew.config.defaults import default_config, default_sources
from newsbrew.config.error_hints import format_validation_error, get_error_hint
from newsbrew.config.loader import ConfigLoader, ConfigValidationError
from newsbrew.config.schemas import (
    AppConfig,
    CurationConfig,
    DedupConfig,
    DiversityLimits,
    ScoringConfig,
    SourceDriver,
    SourceSpec,
    SyncConfig,
)


__all__ = [
    "AppConfig",
    "ConfigLoader",
    "ConfigValidationError",
    "CurationConfig",
    "DedupConfig",
    "DiversityLimits",
    "ScoringConfig",
    "SourceDriver",
    "SourceSpec",
    "SyncConfig",
    "default_config",
    "default_sources",
    "format_validation_error",
    "get_error_hint",
]
