"""Digest generation: rules, dedup, scoring, sort and diversity in one pass."""

import sqlite3
import time
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from newsbrew.config.schemas.curation import CurationConfig
from newsbrew.curation.constants import DEFAULT_MAX_ITEMS
from newsbrew.curation.dedup import Deduplicator
from newsbrew.curation.diversity import enforce_diversity
from newsbrew.curation.errors import DigestGenerationError
from newsbrew.curation.metrics import CurationMetrics
from newsbrew.curation.models import Digest, DigestMeta, DigestSection
from newsbrew.curation.rules import apply_rules, count_applied_rules
from newsbrew.curation.scoring import Scorer
from newsbrew.data_model import CanonicalItem
from newsbrew.store import ItemFilter, ItemOrder, StateStore, StateStoreError
from newsbrew.store.models import Rule


logger = structlog.get_logger()


def format_window(window: timedelta) -> str:
    """Render a window as whole hours (``24h``) or minutes (``90m``)."""
    minutes = int(window.total_seconds() // 60)
    if minutes % 60 == 0:
        return f"{minutes // 60}h"
    return f"{minutes}m"


def build_sections(items: Sequence[CanonicalItem]) -> list[DigestSection]:
    """Group item ids by source name in first-seen order."""
    order: list[str] = []
    icons: dict[str, str] = {}
    ids: dict[str, list[str]] = {}
    for item in items:
        name = item.source.name
        if name not in ids:
            order.append(name)
            icons[name] = item.source.icon
            ids[name] = []
        ids[name].append(item.id)
    return [DigestSection(name=name, icon=icons[name], item_ids=ids[name]) for name in order]


class CurationEngine:
    """Turns a window of stored history into one ranked digest.

    Generation is sequential and must not run concurrently against the
    same store.
    """

    def __init__(
        self,
        store: StateStore,
        config: CurationConfig | None = None,
        run_id: str = "",
    ) -> None:
        """Initialize the engine.

        Args:
            store: Connected state store.
            config: Curation parameters (defaults when omitted).
            run_id: Run identifier for logging.
        """
        self._store = store
        self._config = config or CurationConfig()
        self._metrics = CurationMetrics.get_instance()
        self._log = logger.bind(component="curation", run_id=run_id)

    def generate_digest(
        self,
        window: timedelta | None = None,
        max_items: int | None = None,
        title: str | None = None,
        now: datetime | None = None,
    ) -> Digest:
        """Generate a digest over items fetched inside a window.

        Args:
            window: How far back to look (defaults to the configured hours).
            max_items: Selection size; non-positive means the default.
            title: Digest title.
            now: Reference instant for the window and recency.

        Returns:
            The assembled digest.

        Raises:
            DigestGenerationError: If reading from storage fails.
        """
        start = time.perf_counter()
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        if window is None:
            window = timedelta(hours=self._config.window_hours)
        max_items = self._config.max_items if max_items is None else max_items
        if max_items <= 0:
            max_items = DEFAULT_MAX_ITEMS
        title = title or self._config.title

        items, rules, weights = self._load(now - window)
        considered = len(items)

        filtered, boosts = apply_rules(
            items, rules, boost_multiplier=self._config.scoring.boost_multiplier
        )
        rules_applied = count_applied_rules(considered, len(filtered), boosts)

        deduplicator = Deduplicator(self._config.dedup, record_edge=self._record_edge)
        deduped = deduplicator.dedup(filtered)
        items_deduped = len(filtered) - len(deduped)

        scored = Scorer(self._config.scoring, now=now).score(deduped, weights, boosts)
        # sorted() is stable, so ties keep chronological order
        ranked = sorted(scored, key=lambda item: item.computed_score, reverse=True)
        selected = enforce_diversity(ranked, self._config.diversity, max_items)

        for item in selected:
            self._persist_score(item)

        digest = Digest(
            generated_at=now,
            title=title,
            window=format_window(window),
            max_items=max_items,
            item_count=len(selected),
            items=selected,
            sections=build_sections(selected),
            meta=DigestMeta(
                sources_synced=len({item.source.name for item in selected}),
                items_considered=considered,
                items_deduped=items_deduped,
                rules_applied=rules_applied,
            ),
        )

        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_generation(
            items_in=considered,
            items_out=len(selected),
            items_muted=considered - len(filtered),
            dedup_strategies=[m.strategy.value for m in deduplicator.matches],
            scores=[item.computed_score for item in selected],
            duration_ms=duration_ms,
        )
        self._log.info(
            "digest_generated",
            window=digest.window,
            items_considered=considered,
            items_deduped=items_deduped,
            rules_applied=rules_applied,
            item_count=digest.item_count,
            duration_ms=round(duration_ms, 2),
        )
        return digest

    def _load(
        self, since: datetime
    ) -> tuple[list[CanonicalItem], list[Rule], dict[str, float]]:
        """Read the window, active rules and source weights."""
        try:
            items = self._store.list_items(
                ItemFilter(since=since, order=ItemOrder.CHRONOLOGICAL)
            )
            rules = self._store.list_rules(enabled_only=True)
            weights = {s.name: s.weight for s in self._store.list_sources()}
        except (StateStoreError, sqlite3.Error) as e:
            self._log.error("digest_load_failed", error=str(e))
            msg = f"Failed to load items: {e}"
            raise DigestGenerationError(msg, cause=e) from e
        return items, rules, weights

    def _record_edge(self, kept_id: str, dropped_id: str, confidence: float) -> None:
        try:
            self._store.insert_dedup_edge(kept_id, dropped_id, confidence)
        except (StateStoreError, sqlite3.Error) as e:
            self._log.warning(
                "dedup_edge_failed", kept_id=kept_id, dropped_id=dropped_id, error=str(e)
            )

    def _persist_score(self, item: CanonicalItem) -> None:
        try:
            self._store.update_score(item.id, item.computed_score)
        except (StateStoreError, sqlite3.Error) as e:
            self._log.warning("score_update_failed", item_id=item.id, error=str(e))
