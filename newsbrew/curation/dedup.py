"""Duplicate detection over a window of items.

Each incoming item is checked against the already accepted items with
three strategies, in order: exact fingerprint, exact canonical URL, fuzzy
title. The first match drops the item and records an edge; survivors keep
their input order.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

import structlog

from newsbrew.config.schemas.curation import DedupConfig
from newsbrew.data_model import CanonicalItem


logger = structlog.get_logger()

EdgeRecorder = Callable[[str, str, float], object]


class DedupStrategy(str, Enum):
    """Match strategy, in the order they are attempted."""

    FINGERPRINT = "fingerprint"
    CANONICAL_URL = "canonical_url"
    FUZZY_TITLE = "fuzzy_title"


STRATEGY_CONFIDENCE: dict[DedupStrategy, float] = {
    DedupStrategy.FINGERPRINT: 1.0,
    DedupStrategy.CANONICAL_URL: 0.95,
    DedupStrategy.FUZZY_TITLE: 0.8,
}


@dataclass(frozen=True)
class DedupMatch:
    """One collapsed pair."""

    kept_id: str
    dropped_id: str
    strategy: DedupStrategy

    @property
    def confidence(self) -> float:
        """Confidence of the strategy that matched."""
        return STRATEGY_CONFIDENCE[self.strategy]


def normalize_title(title: str, prefixes: Sequence[str] = ()) -> str:
    """Lowercase, trim and strip forum prefixes such as ``show hn: ``."""
    normalized = title.strip().lower()
    for prefix in prefixes:
        normalized = normalized.removeprefix(prefix)
    return normalized


def titles_match(a: str, b: str, min_length_ratio: float) -> bool:
    """Check whether two normalized titles denote the same story.

    Titles match when identical, or when one contains the other and the
    shorter is more than ``min_length_ratio`` of the longer's length.
    """
    if not a or not b:
        return False
    if a == b:
        return True
    if a in b or b in a:
        shorter, longer = sorted((len(a), len(b)))
        return shorter / longer > min_length_ratio
    return False


class Deduplicator:
    """Collapses near-duplicate items, first occurrence wins."""

    def __init__(
        self,
        config: DedupConfig | None = None,
        record_edge: EdgeRecorder | None = None,
    ) -> None:
        """Initialize the deduplicator.

        Args:
            config: Fuzzy title parameters.
            record_edge: Called with (kept_id, dropped_id, confidence) for
                every collapsed pair.
        """
        self._config = config or DedupConfig()
        self._record_edge = record_edge
        self._matches: list[DedupMatch] = []
        self._log = logger.bind(component="curation", subcomponent="dedup")

    @property
    def matches(self) -> list[DedupMatch]:
        """Pairs collapsed by the last ``dedup`` call."""
        return list(self._matches)

    def dedup(self, items: Sequence[CanonicalItem]) -> list[CanonicalItem]:
        """Remove duplicates from a list of items.

        Args:
            items: Items in priority order (earliest wins).

        Returns:
            Surviving items in input order.
        """
        self._matches = []
        prefixes = self._config.title_prefixes
        ratio = self._config.title_length_ratio

        accepted: list[CanonicalItem] = []
        accepted_titles: list[str] = []
        by_fingerprint: dict[str, int] = {}
        by_canonical_url: dict[str, int] = {}

        for item in items:
            title = normalize_title(item.title, prefixes)
            match = self._find_match(
                item, title, accepted_titles, by_fingerprint, by_canonical_url
            )
            if match is not None:
                kept_index, strategy = match
                self._collapse(accepted[kept_index], item, strategy)
                continue

            index = len(accepted)
            by_fingerprint[item.fingerprint] = index
            if item.canonical_url:
                by_canonical_url[item.canonical_url] = index
            accepted.append(item)
            accepted_titles.append(title)

        self._log.debug(
            "dedup_complete",
            items_in=len(items),
            items_out=len(accepted),
            ratio=ratio,
        )
        return accepted

    def _find_match(
        self,
        item: CanonicalItem,
        title: str,
        accepted_titles: list[str],
        by_fingerprint: dict[str, int],
        by_canonical_url: dict[str, int],
    ) -> tuple[int, DedupStrategy] | None:
        index = by_fingerprint.get(item.fingerprint)
        if index is not None:
            return index, DedupStrategy.FINGERPRINT

        if item.canonical_url:
            index = by_canonical_url.get(item.canonical_url)
            if index is not None:
                return index, DedupStrategy.CANONICAL_URL

        ratio = self._config.title_length_ratio
        for index, existing in enumerate(accepted_titles):
            if titles_match(title, existing, ratio):
                return index, DedupStrategy.FUZZY_TITLE
        return None

    def _collapse(
        self, kept: CanonicalItem, dropped: CanonicalItem, strategy: DedupStrategy
    ) -> None:
        match = DedupMatch(kept_id=kept.id, dropped_id=dropped.id, strategy=strategy)
        self._matches.append(match)
        if self._record_edge is not None:
            self._record_edge(kept.id, dropped.id, match.confidence)
