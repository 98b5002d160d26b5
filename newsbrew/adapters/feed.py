"""Generic RSS/Atom feed adapters."""

import calendar
import html
import re
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import feedparser  # type: ignore[import-untyped]

from newsbrew.adapters.base import BaseAdapter, FetchContext, Priority, RawItem, truncate
from newsbrew.adapters.errors import ParseError
from newsbrew.fetch import HttpFetcher


_TAG_PATTERN = re.compile(r"<[^>]+>")
_SPACE_PATTERN = re.compile(r"\s+")

SUMMARY_LIMIT = 300

TLDR_FEEDS: dict[str, str] = {
    "ai": "https://tldr.tech/api/rss/ai",
    "tech": "https://tldr.tech/api/rss/tech",
    "webdev": "https://tldr.tech/api/rss/webdev",
}


def strip_html(text: str) -> str:
    """Reduce an HTML fragment to single-spaced plain text."""
    text = _TAG_PATTERN.sub(" ", text or "")
    return _SPACE_PATTERN.sub(" ", html.unescape(text)).strip()


def entry_timestamp(entry: feedparser.FeedParserDict) -> datetime | None:
    """Extract the publication (or update) time of a feed entry in UTC."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime.fromtimestamp(calendar.timegm(parsed), tz=UTC)
            except (ValueError, OverflowError):
                continue
    return None


class FeedAdapter(BaseAdapter):
    """Fetches the newest entries of an RSS 2.0 or Atom feed.

    Priority reflects recency: under an hour is HIGH, under six hours is
    MEDIUM, older entries are LOW.
    """

    DEFAULT_NAME = "Feed"
    DEFAULT_ICON = "📰"
    KIND = "rss"
    DEFAULT_MAX = 5
    CATEGORY = "news"

    def __init__(
        self,
        http_client: HttpFetcher,
        feed_url: str,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            feed_url: Feed location.
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._feed_url = feed_url

    @property
    def url(self) -> str:
        """Feed location recorded on source registration."""
        return self._feed_url

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        body = self._fetch_bytes(ctx, self._feed_url)
        feed = feedparser.parse(body)

        if feed.bozo and not feed.entries:
            raise ParseError(
                f"Unreadable feed: {feed.get('bozo_exception')}",
                source_name=self.name,
                context=body[:200].decode("utf-8", errors="replace"),
            )
        if feed.bozo:
            self._log.warning(
                "feed_parse_warning", bozo_exception=str(feed.get("bozo_exception"))
            )

        items: list[RawItem] = []
        for entry in feed.entries:
            if len(items) >= max_items:
                break
            title = strip_html(entry.get("title", ""))
            if not title:
                continue
            published = entry_timestamp(entry)
            items.append(
                RawItem(
                    title=title,
                    url=entry.get("link", ""),
                    summary=truncate(strip_html(entry.get("summary", "")), SUMMARY_LIMIT),
                    published_at=published,
                    priority=self.priority_for(published, ctx.now),
                    category=self.CATEGORY,
                    tags=tuple(
                        t["term"] for t in entry.get("tags", ()) if t.get("term")
                    ),
                )
            )
        return items

    def priority_for(self, published: datetime | None, now: datetime) -> Priority:
        """Derive an entry's priority from its age."""
        age = now - (published or now)
        if age < timedelta(hours=1):
            return Priority.HIGH
        if age < timedelta(hours=6):
            return Priority.MEDIUM
        return Priority.LOW


class TldrAdapter(FeedAdapter):
    """Fetches one of the TLDR newsletter feeds.

    Entries younger than six hours are HIGH, everything else MEDIUM.
    """

    DEFAULT_NAME = "TLDR"
    DEFAULT_ICON = "🧠"
    KIND = "tldr"
    DEFAULT_MAX = 8
    CATEGORY = "newsletter"

    def __init__(
        self,
        http_client: HttpFetcher,
        edition: str = "ai",
        feed_url: str | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            edition: Newsletter edition key in ``TLDR_FEEDS``.
            feed_url: Explicit feed location, overriding the edition.
            name: Display name override.
            icon: Icon override.

        Raises:
            ValueError: If the edition is unknown and no feed_url is given.
        """
        if feed_url is None:
            if edition not in TLDR_FEEDS:
                msg = f"Unknown TLDR edition: {edition}"
                raise ValueError(msg)
            feed_url = TLDR_FEEDS[edition]
        super().__init__(
            http_client,
            feed_url=feed_url,
            name=name or f"TLDR {edition.upper() if edition == 'ai' else edition.title()}",
            icon=icon,
        )

    def priority_for(self, published: datetime | None, now: datetime) -> Priority:
        """Fresh newsletter issues are HIGH, the rest MEDIUM."""
        age = now - (published or now)
        if age < timedelta(hours=6):
            return Priority.HIGH
        return Priority.MEDIUM
