"""Digest value objects."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field

from newsbrew.curation.constants import DIGEST_TYPE, DIGEST_VERSION
from newsbrew.data_model import CanonicalItem, StrictBaseModel


class DigestSection(StrictBaseModel):
    """Selected items grouped under one source."""

    name: Annotated[str, Field(min_length=1, description="Source name")]
    icon: str = Field(default="", description="Source icon")
    item_ids: list[str] = Field(default_factory=list, description="Item ids")


class DigestMeta(StrictBaseModel):
    """Statistics about one digest generation."""

    sources_synced: Annotated[int, Field(ge=0)] = 0
    items_considered: Annotated[int, Field(ge=0)] = 0
    items_deduped: Annotated[int, Field(ge=0)] = 0
    rules_applied: Annotated[int, Field(ge=0)] = 0


class Digest(StrictBaseModel):
    """Immutable snapshot of one curated digest."""

    type: Literal["trss-digest"] = DIGEST_TYPE
    version: Literal["1"] = DIGEST_VERSION
    generated_at: datetime = Field(description="Generation timestamp (UTC)")
    title: Annotated[str, Field(min_length=1)]
    window: str = Field(description="Time window, e.g. '24h'")
    max_items: Annotated[int, Field(ge=1)]
    item_count: Annotated[int, Field(ge=0)]
    items: list[CanonicalItem] = Field(default_factory=list)
    sections: list[DigestSection] = Field(default_factory=list)
    meta: DigestMeta = Field(default_factory=DigestMeta)
