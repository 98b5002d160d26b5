"""Canonical item interchange record.

The canonical item is produced by ingestion, persisted by the store and
consumed by curation and export.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import Field, field_validator

from newsbrew.data_model.base import StrictBaseModel


class ItemState(str, Enum):
    """Lifecycle flag set by user actions."""

    UNREAD = "unread"
    READ = "read"
    SAVED = "saved"


class SourceRef(StrictBaseModel):
    """Denormalized snapshot of the source an item came from."""

    name: Annotated[str, Field(min_length=1, description="Source display name")]
    icon: str = Field(default="", description="Source icon")


class Engagement(StrictBaseModel):
    """Sparse engagement signals reported by a source.

    Every signal is optional; sources report only what they have.
    """

    points: int | None = Field(default=None, ge=0, description="Upvotes/points")
    stars: int | None = Field(default=None, ge=0, description="Repository stars")
    comments: int | None = Field(default=None, ge=0, description="Comment count")

    @property
    def is_empty(self) -> bool:
        """Whether no signal is present at all."""
        return self.points is None and self.stars is None and self.comments is None


def _as_utc(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return value


class CanonicalItem(StrictBaseModel):
    """Normalized content item.

    Identity fields (``id`` and ``fingerprint``) are derived from the
    canonical URL, or from the ``title||source`` fallback key when the item
    has no link.
    """

    id: Annotated[str, Field(min_length=1, description="Short content hash")]
    fingerprint: Annotated[
        str, Field(min_length=1, description="Primary deduplication key")
    ]
    title: Annotated[str, Field(min_length=1, description="Item title")]
    url: str = Field(default="", description="Original URL")
    canonical_url: str = Field(default="", description="Canonicalized URL")
    summary: str = Field(default="", description="Short summary")
    body: str = Field(default="", description="Body text")
    source: SourceRef = Field(description="Source snapshot")
    published_at: datetime = Field(description="Publication timestamp (UTC)")
    fetched_at: datetime = Field(description="Fetch timestamp (UTC)")
    tags: list[str] = Field(default_factory=list, description="Item tags")
    raw_score: float = Field(
        default=0.0, ge=0.0, le=10.0, description="Priority-derived seed score"
    )
    computed_score: float = Field(
        default=0.0, ge=0.0, description="Score from the last digest generation"
    )
    engagement: Engagement | None = Field(
        default=None, description="Optional engagement signals"
    )
    state: ItemState = Field(default=ItemState.UNREAD, description="User state")

    @field_validator("published_at", "fetched_at", mode="before")
    @classmethod
    def ensure_utc(cls, v: Any) -> Any:
        """Normalize timestamps to timezone-aware UTC."""
        if isinstance(v, str):
            v = datetime.fromisoformat(v)
        return _as_utc(v)

    def with_score(self, score: float) -> "CanonicalItem":
        """Return a copy carrying a new computed score.

        Args:
            score: New computed score.

        Returns:
            Updated item copy.
        """
        return self.model_copy(update={"computed_score": score})
