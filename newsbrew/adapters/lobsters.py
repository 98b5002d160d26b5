"""Lobsters hottest stories adapter."""

from collections.abc import Mapping, Sequence
from typing import Any

from newsbrew.adapters.base import (
    BaseAdapter,
    FetchContext,
    RawItem,
    parse_timestamp,
    priority_from_thresholds,
    truncate,
)
from newsbrew.adapters.errors import SchemaError
from newsbrew.data_model import Engagement
from newsbrew.fetch import HttpFetcher


HOTTEST_URL = "https://lobste.rs/hottest.json"

# Stories flagged more often than this are skipped
MAX_FLAGS = 2


class LobstersAdapter(BaseAdapter):
    """Fetches the Lobsters hottest page, optionally filtered by tag."""

    DEFAULT_NAME = "Lobsters"
    DEFAULT_ICON = "🦞"
    KIND = "lobsters"
    DEFAULT_MAX = 10
    HOMEPAGE = "https://lobste.rs"

    def __init__(
        self,
        http_client: HttpFetcher,
        tags: Sequence[str] | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            tags: Keep only stories carrying at least one of these tags.
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._tags = frozenset(tags or ())

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        stories = self._fetch_json(ctx, HOTTEST_URL)
        if not isinstance(stories, list):
            raise SchemaError(
                "Hottest listing is not a list", source_name=self.name, expected="list"
            )

        items: list[RawItem] = []
        for story in stories:
            if len(items) >= max_items:
                break
            story_tags = [t for t in story.get("tags") or () if isinstance(t, str)]
            if self._tags and not self._tags.intersection(story_tags):
                continue
            if int(story.get("flags") or 0) > MAX_FLAGS:
                continue
            if not story.get("title"):
                continue
            items.append(self._to_item(story, story_tags))
        return items

    def _to_item(self, story: dict[str, Any], tags: list[str]) -> RawItem:
        points = int(story.get("score") or 0)
        comments = int(story.get("comment_count") or 0)
        return RawItem(
            title=str(story["title"]),
            url=story.get("url") or story.get("comments_url") or "",
            summary=truncate(story.get("description_plain") or "", 300),
            published_at=parse_timestamp(story.get("created_at")),
            priority=priority_from_thresholds(
                points, urgent=30, high=15, medium=5, inclusive=True
            ),
            category="tech",
            tags=tuple(tags),
            engagement=Engagement(points=points, comments=comments),
        )
