"""Factories for canonical items used across test modules."""

from datetime import datetime, timedelta
from typing import Any

from newsbrew.canonical import fingerprint, generate_id, identity_seed
from newsbrew.data_model import CanonicalItem, Engagement, SourceRef
from tests.helpers.time import FIXED_NOW


def make_item(
    title: str = "Example story",
    url: str = "https://example.com/story",
    source: str = "Hacker News",
    icon: str = "🔶",
    age: timedelta = timedelta(hours=1),
    fetched_at: datetime | None = None,
    tags: list[str] | None = None,
    engagement: Engagement | None = None,
    **overrides: Any,
) -> CanonicalItem:
    """Build a canonical item with identity derived the way ingestion does."""
    canonical_url, seed = identity_seed(url, title, source)
    published_at = FIXED_NOW - age
    fields: dict[str, Any] = {
        "id": generate_id(seed),
        "fingerprint": fingerprint(seed),
        "title": title,
        "url": url,
        "canonical_url": canonical_url,
        "source": SourceRef(name=source, icon=icon),
        "published_at": published_at,
        "fetched_at": fetched_at or published_at,
        "tags": tags or [],
        "raw_score": 5.0,
        "engagement": engagement,
    }
    fields.update(overrides)
    return CanonicalItem(**fields)
