"""Data models for the SQLite state store."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import Field

from newsbrew.data_model import CanonicalItem, StrictBaseModel


class ItemEventType(str, Enum):
    """Event type for item upsert operations.

    - NEW: Item row was newly created
    - UPDATED: Row existed but its content hash changed
    - UNCHANGED: Row existed with the same content hash
    """

    NEW = "NEW"
    UPDATED = "UPDATED"
    UNCHANGED = "UNCHANGED"


class RuleKind(str, Enum):
    """Kinds of user curation rules."""

    MUTE_DOMAIN = "mute_domain"
    MUTE_SOURCE = "mute_source"
    BOOST_TAG = "boost_tag"
    BOOST_DOMAIN = "boost_domain"


class ItemOrder(str, Enum):
    """Ordering for item listings.

    - RANKED: computed score descending, then most recent first
    - CHRONOLOGICAL: oldest fetch first, in ingestion order
    """

    RANKED = "ranked"
    CHRONOLOGICAL = "chronological"


class SourceRecord(StrictBaseModel):
    """Registration metadata for one configured source."""

    id: int = Field(ge=1, description="Row identifier")
    name: Annotated[str, Field(min_length=1, description="Source display name")]
    kind: Annotated[str, Field(min_length=1, description="Adapter driver kind")]
    url: str = Field(default="", description="Upstream URL")
    icon: str = Field(default="", description="Display icon")
    weight: float = Field(default=1.0, ge=0.0, description="Scoring multiplier")
    enabled: bool = Field(default=True, description="Whether the source is active")
    last_sync: datetime | None = Field(
        default=None, description="Last successful sync timestamp"
    )
    error_count: int = Field(default=0, ge=0, description="Consecutive failures")


class Rule(StrictBaseModel):
    """User-defined mute or boost rule."""

    id: int = Field(ge=1, description="Row identifier")
    kind: RuleKind = Field(description="Rule kind")
    pattern: Annotated[str, Field(min_length=1, description="Match pattern")]
    enabled: bool = Field(default=True, description="Whether the rule is active")
    created_at: datetime | None = Field(default=None, description="Creation time")


class DedupEdge(StrictBaseModel):
    """Audit record linking two duplicate items.

    ``item_id_a`` is always lexically less than or equal to ``item_id_b``.
    """

    item_id_a: str = Field(min_length=1)
    item_id_b: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)


class UpsertResult(StrictBaseModel):
    """Result of an item upsert operation."""

    event_type: ItemEventType = Field(description="What happened during upsert")
    affected_rows: int = Field(ge=0, description="Number of rows affected")
    item: CanonicalItem = Field(description="The upserted item")


class ItemFilter(StrictBaseModel):
    """Filter for listing stored items."""

    since: datetime | None = Field(
        default=None, description="Only items fetched at or after this instant"
    )
    source_name: str | None = Field(default=None, description="Restrict to a source")
    unread_only: bool = Field(default=False, description="Only unread items")
    limit: int | None = Field(default=None, ge=1, description="Maximum rows")
    order: ItemOrder = Field(default=ItemOrder.RANKED, description="Row ordering")
