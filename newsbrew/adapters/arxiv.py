"""arXiv recent submissions adapter (Atom API)."""

import re
from collections.abc import Mapping, Sequence
from typing import Any

import feedparser  # type: ignore[import-untyped]

from newsbrew.adapters.base import (
    BaseAdapter,
    FetchContext,
    Priority,
    RawItem,
    truncate,
)
from newsbrew.adapters.errors import ParseError
from newsbrew.adapters.feed import entry_timestamp
from newsbrew.fetch import HttpFetcher


API_URL = "https://export.arxiv.org/api/query"

DEFAULT_CATEGORIES: tuple[str, ...] = ("cs.CL", "cs.AI", "cs.LG", "cs.MA")

# Keywords that make a paper relevant to practitioners building with LLMs
RELEVANCE_PATTERNS: tuple[str, ...] = (
    r"\bllm\b", r"\blarge language model", r"\bfoundation model",
    r"\btransformer\b", r"\battention\b", r"\bpre.?train",
    r"\bagent\b", r"\bagentic\b", r"\bmulti.?agent\b",
    r"\btool\s*(use|call|ing)\b", r"\bfunction call",
    r"\bplanning\b", r"\borchestrat", r"\bworkflow\b",
    r"\breason(ing)?\b", r"chain.of.thought", r"\bcot\b",
    r"\bthink(ing)?\b", r"\bself.?reflect", r"\bverif",
    r"\brag\b", r"\bretrieval", r"\bvector", r"\bembedding",
    r"\bknowledge.?(graph|base)\b", r"\bsemantic.?search",
    r"\bprompt", r"\binstruct", r"\bfine.?tun", r"\balign",
    r"\brlhf\b", r"\bdpo\b", r"\breinforcement",
    r"\bin.?context.?learn", r"\bfew.?shot", r"\bzero.?shot",
    r"\bgpt\b", r"\bclaude\b", r"\bllama\b", r"\bgemini\b",
    r"\bmistral\b", r"\bqwen\b", r"\bdeepseek\b",
    r"\binference\b", r"\bserving\b", r"\blatency\b",
    r"\bquantiz", r"\bdistill", r"\bprun",
    r"\bcontext.?window\b", r"\blong.?context",
    r"\bscaling\b", r"\befficien", r"\bbenchmark", r"\bevaluat",
    r"\bcode.?gen", r"\bcoding\b", r"\bprogram.?synth",
    r"\bsoftware.?eng", r"\bdebug",
    r"\bhallucin", r"\bground(ing|ed)\b", r"\bfaithful",
    r"\bsafety\b", r"\bjailbreak\b", r"\bred.?team",
    r"\bmemory\b", r"\bchat\b", r"\bconversat",
    r"\bsummariz", r"\bcompress",
    r"\bmultimodal\b", r"\bvision.?language\b", r"\bvlm\b",
    r"\bapi\b", r"\bdeployment\b", r"\bproduction\b",
    r"\bcost\b", r"\boptimiz", r"\bcach", r"\btokeniz", r"\btoken\b",
)  # fmt: skip

RELEVANCE_REGEX = re.compile("|".join(RELEVANCE_PATTERNS), re.IGNORECASE)


def relevance_score(text: str) -> int:
    """Count relevance keyword matches in a title plus abstract."""
    return sum(1 for _ in RELEVANCE_REGEX.finditer(text))


class ArxivAdapter(BaseAdapter):
    """Fetches recent arXiv submissions ranked by keyword relevance.

    Over-fetches the newest submissions in the configured categories and
    keeps the entries with the most relevance keyword matches; ties keep
    submission order.
    """

    DEFAULT_NAME = "arXiv"
    DEFAULT_ICON = "📄"
    KIND = "arxiv"
    DEFAULT_MAX = 5
    HOMEPAGE = "https://arxiv.org"

    def __init__(
        self,
        http_client: HttpFetcher,
        categories: Sequence[str] | None = None,
        name: str | None = None,
        icon: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared HTTP client.
            categories: arXiv categories such as ``cs.CL``.
            name: Display name override.
            icon: Icon override.
        """
        super().__init__(http_client, name=name, icon=icon)
        self._categories = tuple(categories) if categories else DEFAULT_CATEGORIES

    def _collect(
        self,
        ctx: FetchContext,
        max_items: int,
        settings: Mapping[str, Any],
    ) -> list[RawItem]:
        body = self._fetch_bytes(
            ctx,
            API_URL,
            params={
                "search_query": " OR ".join(f"cat:{c}" for c in self._categories),
                "sortBy": "submittedDate",
                "sortOrder": "descending",
                "max_results": str(max(50, max_items * 10)),
            },
        )
        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise ParseError(
                f"Unreadable Atom response: {feed.get('bozo_exception')}",
                source_name=self.name,
            )

        candidates = [
            (relevance_score(f"{e.get('title', '')} {e.get('summary', '')}"), e)
            for e in feed.entries
            if e.get("title")
        ]
        # sorted() is stable so equally relevant papers keep submission order
        candidates = sorted(candidates, key=lambda pair: pair[0], reverse=True)

        return [self._to_item(entry, score) for score, entry in candidates[:max_items]]

    def _to_item(self, entry: feedparser.FeedParserDict, score: int) -> RawItem:
        url = entry.get("id", "")
        for link in entry.get("links", ()):
            if link.get("rel") == "alternate" and link.get("href"):
                url = link["href"]
                break

        authors = [a["name"] for a in entry.get("authors", ()) if a.get("name")]
        author_line = ", ".join(authors[:3]) + (" et al." if len(authors) > 3 else "")
        abstract = " ".join(entry.get("summary", "").split())

        if score >= 8:
            priority = Priority.URGENT
        elif score >= 4:
            priority = Priority.HIGH
        else:
            priority = Priority.MEDIUM

        return RawItem(
            title=" ".join(entry["title"].split()),
            url=url,
            summary=truncate(abstract, 250),
            body=f"Authors: {author_line}\n\n{abstract}",
            published_at=entry_timestamp(entry),
            priority=priority,
            category="research",
            tags=tuple(t["term"] for t in entry.get("tags", ()) if t.get("term")),
        )
