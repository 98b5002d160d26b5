"""GitHub trending repositories adapter (search API)."""

from collections.abc import Mapping, Sequence
from datetime import timedelta
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


SEARCH_URL = "https://api.github.com/search/repositories"

# Only repositories pushed within this window are considered trending
PUSHED_WITHIN = timedelta(days=7)
MIN_STARS = 50


def _format_stars(stars: int) -> str:
    if stars >= 1000:
        return f"{stars / 1000:.1f}k"
    return str(stars)


class GitHubTrendingAdapter(BaseAdapter):
    """Finds recently active, well-starred repositories on GitHub."""

    DEFAULT_NAME = "GitHub Trending"
    DEFAULT_ICON = "⭐"
    KIND = "github-trending"
    DEFAULT_MAX = 8
    HOMEPAGE = "https://github.com"

    def __init__(
        self,
        http_client: HttpFetcher,
        topics: Sequence[str] | None = None,
        token: str | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            topics: Repository topics to search (any of them matches).
            token: Optional API token sent as a bearer token.
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._topics = tuple(topics or ())
        self._token = token

    def build_query(self, ctx: FetchContext) -> str:
        """Build the repository search query for this cycle."""
        since = (ctx.now - PUSHED_WITHIN).strftime("%Y-%m-%d")
        parts: list[str] = []
        if self._topics:
            parts.append("(" + " OR ".join(f"topic:{t}" for t in self._topics) + ")")
        parts.append(f"pushed:>{since}")
        parts.append(f"stars:>{MIN_STARS}")
        return " ".join(parts)

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        payload = self._fetch_json(
            ctx,
            SEARCH_URL,
            params={
                "q": self.build_query(ctx),
                "sort": "stars",
                "order": "desc",
                "per_page": str(max_items),
            },
            headers=headers,
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise SchemaError(
                "Search response has no items list",
                source_name=self.name,
                field="items",
                expected="list",
            )

        return [
            self._to_item(repo)
            for repo in payload["items"]
            if repo.get("full_name") and repo.get("html_url")
        ]

    def _to_item(self, repo: dict[str, Any]) -> RawItem:
        stars = int(repo.get("stargazers_count") or 0)
        owner = (repo.get("owner") or {}).get("login", "")
        language = repo.get("language") or ""
        topics = tuple(t for t in repo.get("topics") or () if isinstance(t, str))

        return RawItem(
            title=str(repo["full_name"]),
            url=str(repo["html_url"]),
            summary=f"★ {_format_stars(stars)} • {owner}",
            body=truncate(repo.get("description") or "", 80),
            published_at=parse_timestamp(repo.get("pushed_at") or repo.get("updated_at")),
            priority=priority_from_thresholds(stars, urgent=5000, high=1000, medium=200),
            category="github",
            tags=topics,
            language=language,
            engagement=Engagement(stars=stars),
        )
