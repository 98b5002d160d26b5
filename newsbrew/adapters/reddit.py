"""Reddit subreddit listing adapter."""

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
from newsbrew.adapters.errors import AdapterError, AdapterErrorClass
from newsbrew.data_model import Engagement
from newsbrew.fetch import HttpFetcher


LISTING_URL = "https://www.reddit.com/r/{subreddit}/{sort}.json"
THREAD_BASE = "https://www.reddit.com"

# Reddit blocks generic user agents
USER_AGENT = "newsbrew:v0.1 (digest reader)"

# Posts below this score are mostly pinned or spam
MIN_SCORE = 2

DEFAULT_SUBREDDITS: tuple[str, ...] = ("programming",)
VALID_SORTS = frozenset({"hot", "top", "new", "rising"})


class RedditAdapter(BaseAdapter):
    """Fetches posts from one or more subreddits.

    A failing subreddit is skipped; the source fails only when every
    subreddit failed.
    """

    DEFAULT_NAME = "Reddit"
    DEFAULT_ICON = "🤖"
    KIND = "reddit"
    DEFAULT_MAX = 8
    HOMEPAGE = "https://www.reddit.com"

    def __init__(
        self,
        http_client: HttpFetcher,
        subreddits: Sequence[str] | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            subreddits: Subreddit names without the ``r/`` prefix.
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._subreddits = tuple(subreddits) if subreddits else DEFAULT_SUBREDDITS

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        sort = settings.get("sort", "hot")
        if sort not in VALID_SORTS:
            sort = "hot"

        per_sub = max_items
        if len(self._subreddits) > 1:
            per_sub = max_items // len(self._subreddits) + 1

        items: list[RawItem] = []
        failures = 0
        last_error: AdapterError | None = None
        for subreddit in self._subreddits:
            try:
                items.extend(self._fetch_subreddit(ctx, subreddit, sort, per_sub))
            except AdapterError as e:
                if e.error_class == AdapterErrorClass.TIMEOUT:
                    raise
                self._log.info("subreddit_failed", subreddit=subreddit, error=e.message)
                failures += 1
                last_error = e

        if last_error is not None and failures == len(self._subreddits):
            raise last_error
        return items[:max_items]

    def _fetch_subreddit(
        self,
        ctx: FetchContext,
        subreddit: str,
        sort: str,
        limit: int,
    ) -> list[RawItem]:
        payload = self._fetch_json(
            ctx,
            LISTING_URL.format(subreddit=subreddit, sort=sort),
            params={"limit": str(limit), "raw_json": "1"},
            headers={"User-Agent": USER_AGENT},
        )
        children = (
            payload.get("data", {}).get("children", [])
            if isinstance(payload, dict)
            else []
        )

        items: list[RawItem] = []
        for child in children:
            post = child.get("data") or {}
            score = int(post.get("score") or 0)
            if score < MIN_SCORE or not post.get("title"):
                continue
            items.append(self._to_item(post, score))
        return items

    def _to_item(self, post: dict[str, Any], score: int) -> RawItem:
        thread_url = THREAD_BASE + str(post.get("permalink", ""))
        url = thread_url if post.get("is_self") else (post.get("url") or thread_url)

        tags = [str(post.get("subreddit", ""))]
        if post.get("link_flair_text"):
            tags.append(str(post["link_flair_text"]))

        return RawItem(
            title=str(post["title"]),
            url=url,
            summary=truncate(post.get("selftext") or "", 300),
            published_at=parse_timestamp(post.get("created_utc")),
            priority=priority_from_thresholds(
                score, urgent=500, high=100, medium=20, inclusive=True
            ),
            category="discussion",
            tags=tuple(t for t in tags if t),
            engagement=Engagement(
                points=score, comments=int(post.get("num_comments") or 0)
            ),
        )
