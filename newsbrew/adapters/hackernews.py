"""Hacker News top stories adapter."""

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from newsbrew.adapters.base import (
    BaseAdapter,
    FetchContext,
    RawItem,
    parse_timestamp,
    priority_from_thresholds,
)
from newsbrew.adapters.errors import AdapterError, SchemaError
from newsbrew.data_model import Engagement


API_BASE = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_URL = f"{API_BASE}/topstories.json"
ITEM_URL = API_BASE + "/item/{id}.json"
DISCUSSION_URL = "https://news.ycombinator.com/item?id={id}"

# Upper bound on parallel item detail requests
MAX_DETAIL_WORKERS = 8


class HackerNewsAdapter(BaseAdapter):
    """Fetches the current Hacker News front page.

    The listing call returns story ids only; story details are fetched in
    parallel with a small thread pool sized to the listing.
    """

    DEFAULT_NAME = "Hacker News"
    DEFAULT_ICON = "🔶"
    KIND = "hackernews"
    DEFAULT_MAX = 8
    HOMEPAGE = "https://news.ycombinator.com"

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        ids = self._fetch_json(ctx, TOP_STORIES_URL)
        if not isinstance(ids, list):
            raise SchemaError(
                "Top stories listing is not a list",
                source_name=self.name,
                expected="list[int]",
            )
        ids = ids[:max_items]
        if not ids:
            return []

        with ThreadPoolExecutor(
            max_workers=min(len(ids), MAX_DETAIL_WORKERS),
            thread_name_prefix="hn-item",
        ) as executor:
            stories = list(executor.map(lambda sid: self._fetch_story(ctx, sid), ids))

        items = [self._to_item(story) for story in stories if story is not None]
        failed = len(ids) - len(items)
        if failed:
            self._log.info("story_details_skipped", count=failed)
        return items

    def _fetch_story(self, ctx: FetchContext, story_id: int) -> dict[str, Any] | None:
        """Fetch one story, returning None when it fails or is not a story."""
        try:
            story = self._fetch_json(ctx, ITEM_URL.format(id=story_id))
        except AdapterError as e:
            self._log.debug("story_fetch_failed", story_id=story_id, error=e.message)
            return None
        if not isinstance(story, dict) or not story.get("title"):
            return None
        return story

    def _to_item(self, story: dict[str, Any]) -> RawItem:
        story_id = story.get("id")
        points = int(story.get("score") or 0)
        comments = int(story.get("descendants") or 0)
        discussion = DISCUSSION_URL.format(id=story_id)

        return RawItem(
            title=str(story["title"]),
            url=story.get("url") or discussion,
            summary=f"{points} points by {story.get('by', '')} • {comments} comments",
            published_at=parse_timestamp(story.get("time")),
            priority=priority_from_thresholds(points, urgent=500, high=200, medium=50),
            category="hackernews",
            engagement=Engagement(points=points, comments=comments),
        )
