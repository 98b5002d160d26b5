"""Conversion of adapter output into canonical items."""

from collections.abc import Iterable
from datetime import datetime
from typing import Final

from newsbrew.adapters.base import Priority, RawItem
from newsbrew.canonical import fingerprint, generate_id, identity_seed
from newsbrew.data_model import CanonicalItem, SourceRef


PRIORITY_SCORES: Final[dict[Priority, float]] = {
    Priority.URGENT: 9.0,
    Priority.HIGH: 7.0,
    Priority.MEDIUM: 5.0,
    Priority.LOW: 3.0,
}


def priority_to_score(priority: Priority) -> float:
    """Map a coarse priority onto the numeric seed score."""
    return PRIORITY_SCORES.get(priority, PRIORITY_SCORES[Priority.LOW])


def build_tags(raw: RawItem) -> list[str]:
    """Assemble item tags: source labels, then language, then category.

    Blank values are skipped and duplicates collapse to their first
    occurrence.
    """
    candidates: Iterable[str] = (*raw.tags, raw.language, raw.category)
    tags: list[str] = []
    for tag in candidates:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def convert_item(raw: RawItem, source: SourceRef, now: datetime) -> CanonicalItem:
    """Convert a raw adapter item into a canonical item.

    Args:
        raw: Item as returned by the adapter.
        source: Snapshot of the producing source.
        now: Fetch timestamp; also used when the item has no publish time.

    Returns:
        Canonical item with identity fields populated.

    Raises:
        pydantic.ValidationError: If the item cannot form a valid record
            (e.g. a blank title).
    """
    title = raw.title.strip()
    canonical_url, seed = identity_seed(raw.url, title, source.name)
    engagement = raw.engagement
    if engagement is not None and engagement.is_empty:
        engagement = None

    return CanonicalItem(
        id=generate_id(seed),
        fingerprint=fingerprint(seed),
        title=title,
        url=raw.url,
        canonical_url=canonical_url,
        summary=raw.summary,
        body=raw.body,
        source=source,
        published_at=raw.published_at or now,
        fetched_at=now,
        tags=build_tags(raw),
        raw_score=priority_to_score(raw.priority),
        engagement=engagement,
    )
