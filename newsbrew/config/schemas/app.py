"""Top-level application configuration schema."""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator

from newsbrew.config.schemas.curation import CurationConfig
from newsbrew.config.schemas.sources import SourceSpec
from newsbrew.data_model import StrictBaseModel
from newsbrew.fetch import FetchConfig


class SyncConfig(StrictBaseModel):
    """Ingestion cycle limits."""

    timeout_seconds: Annotated[float, Field(gt=0.0, le=600.0)] = 60.0
    max_workers: Annotated[int, Field(ge=1, le=32)] = 4


class AppConfig(StrictBaseModel):
    """Validated contents of the configuration file."""

    version: Literal[1] = 1
    db_path: Path | None = Field(default=None, description="SQLite database file")
    sources: list[SourceSpec] = Field(default_factory=list)
    curation: CurationConfig = Field(default_factory=CurationConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("sources")
    @classmethod
    def validate_unique_keys(cls, v: list[SourceSpec]) -> list[SourceSpec]:
        """Ensure source keys are unique."""
        seen: set[str] = set()
        for spec in v:
            if spec.key in seen:
                msg = f"Duplicate source key: {spec.key}"
                raise ValueError(msg)
            seen.add(spec.key)
        return v

    @property
    def enabled_sources(self) -> list[SourceSpec]:
        """Sources that take part in sync."""
        return [spec for spec in self.sources if spec.enabled]
