"""Unit tests for CurationEngine against a real store."""

from datetime import timedelta
from pathlib import Path

import pytest

from newsbrew.config.schemas import CurationConfig
from newsbrew.curation import (
    CurationEngine,
    CurationMetrics,
    DigestGenerationError,
    build_sections,
    format_window,
)
from newsbrew.data_model import CanonicalItem
from newsbrew.store import ItemFilter, RuleKind, StateStore
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


def _ingest(store: StateStore, *items: CanonicalItem, weight: float = 1.0) -> None:
    for item in items:
        source = store.get_or_create_source(
            item.source.name, "fake", icon=item.source.icon, weight=weight
        )
        store.upsert_item(item, source.id)


class TestFormatWindow:
    """Tests for format_window."""

    def test_hours(self) -> None:
        """Test whole hours render as hours."""
        assert format_window(timedelta(hours=24)) == "24h"
        assert format_window(timedelta(days=2)) == "48h"

    def test_minutes(self) -> None:
        """Test partial hours render as minutes."""
        assert format_window(timedelta(minutes=90)) == "90m"


class TestBuildSections:
    """Tests for build_sections."""

    def test_groups_by_source_in_first_seen_order(self) -> None:
        """Test sections follow the first appearance of each source."""
        a = make_item("A", url="https://a.com", source="Lobsters", icon="🦞")
        b = make_item("B", url="https://b.com", source="HN", icon="🔶")
        c = make_item("C", url="https://c.com", source="Lobsters", icon="🦞")

        sections = build_sections([a, b, c])

        assert [(s.name, s.icon, s.item_ids) for s in sections] == [
            ("Lobsters", "🦞", [a.id, c.id]),
            ("HN", "🔶", [b.id]),
        ]


class TestCurationEngine:
    """Tests for digest generation."""

    def test_empty_store(self, store: StateStore) -> None:
        """Test an empty window yields an empty digest."""
        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert digest.item_count == 0
        assert digest.items == []
        assert digest.sections == []
        assert digest.window == "24h"
        assert digest.title == "Daily Brew"
        assert digest.max_items == 25
        assert digest.type == "trss-digest"
        assert digest.version == "1"
        assert digest.generated_at == FIXED_NOW
        assert digest.meta.items_considered == 0

    def test_window_excludes_old_items(self, store: StateStore) -> None:
        """Test only items fetched inside the window are considered."""
        _ingest(
            store,
            make_item("Recent", url="https://a.com", age=timedelta(hours=2)),
            make_item("Stale", url="https://b.com", age=timedelta(hours=30)),
        )

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)
        wide = CurationEngine(store).generate_digest(
            window=timedelta(hours=48), now=FIXED_NOW
        )

        assert [i.title for i in digest.items] == ["Recent"]
        assert digest.meta.items_considered == 1
        assert wide.item_count == 2
        assert wide.window == "48h"

    def test_explicit_zero_window(self, store: StateStore) -> None:
        """Test a zero window is honoured rather than replaced by the default."""
        _ingest(store, make_item("Recent", url="https://a.com", age=timedelta(hours=2)))

        digest = CurationEngine(store).generate_digest(
            window=timedelta(0), now=FIXED_NOW
        )

        assert digest.item_count == 0
        assert digest.meta.items_considered == 0
        assert digest.window == "0h"

    def test_ranked_by_score(self, store: StateStore) -> None:
        """Test newer items rank first with equal weights."""
        _ingest(
            store,
            make_item("Older", url="https://a.com", source="A", age=timedelta(hours=10)),
            make_item("Newer", url="https://b.com", source="B", age=timedelta(hours=1)),
        )

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert [i.title for i in digest.items] == ["Newer", "Older"]
        assert digest.items[0].computed_score > digest.items[1].computed_score

    def test_dedup_across_sources(self, store: StateStore) -> None:
        """Test the same story from two sources appears once, earliest kept."""
        first = make_item(
            "Big news", url="https://news.com/x", source="HN", age=timedelta(hours=3)
        )
        second = make_item(
            "Big news", url="https://news.com/x/", source="Lobsters", age=timedelta(hours=2)
        )
        _ingest(store, first, second)

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert digest.item_count == 1
        assert digest.items[0].source.name == "HN"
        assert digest.meta.items_considered == 2
        assert digest.meta.items_deduped == 1
        (edge,) = store.list_dedup_edges()
        assert edge.item_id_a == edge.item_id_b == first.id
        assert edge.confidence == 1.0

    def test_mute_rule(self, store: StateStore) -> None:
        """Test muted items are excluded and counted as applied rules."""
        _ingest(
            store,
            make_item("Good", url="https://good.com/a", source="A"),
            make_item("Spam", url="https://spam.com/b", source="B"),
        )
        store.insert_rule(RuleKind.MUTE_DOMAIN, "spam.com")

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert [i.title for i in digest.items] == ["Good"]
        assert digest.meta.rules_applied == 1

    def test_disabled_rule_ignored(self, store: StateStore) -> None:
        """Test disabled rules are not loaded."""
        _ingest(store, make_item("Spam", url="https://spam.com/b"))
        rule = store.insert_rule(RuleKind.MUTE_DOMAIN, "spam.com")
        store.set_rule_enabled(rule.id, False)

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert digest.item_count == 1
        assert digest.meta.rules_applied == 0

    def test_boost_rule_reorders(self, store: StateStore) -> None:
        """Test a boosted tag outranks a slightly newer item."""
        _ingest(
            store,
            make_item(
                "Boosted", url="https://a.com", source="A", age=timedelta(hours=5),
                tags=["rust"],
            ),
            make_item("Plain", url="https://b.com", source="B", age=timedelta(hours=1)),
        )
        store.insert_rule(RuleKind.BOOST_TAG, "Rust")

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert [i.title for i in digest.items] == ["Boosted", "Plain"]
        assert digest.meta.rules_applied == 1

    def test_source_weight(self, store: StateStore) -> None:
        """Test source weights from the store affect ranking."""
        _ingest(
            store,
            make_item("Light", url="https://a.com", source="A", age=timedelta(hours=1)),
        )
        _ingest(
            store,
            make_item("Heavy", url="https://b.com", source="B", age=timedelta(hours=6)),
            weight=3.0,
        )

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert [i.title for i in digest.items] == ["Heavy", "Light"]

    def test_max_items_and_title(self, store: StateStore) -> None:
        """Test explicit size and title override the defaults."""
        _ingest(
            store,
            *[
                make_item(f"Story {n}", url=f"https://s{n}.com", source=f"S{n}")
                for n in range(5)
            ],
        )

        digest = CurationEngine(store).generate_digest(
            max_items=2, title="Morning", now=FIXED_NOW
        )

        assert digest.item_count == 2
        assert digest.max_items == 2
        assert digest.title == "Morning"

    def test_non_positive_max_uses_default(self, store: StateStore) -> None:
        """Test a non-positive size falls back to the default."""
        digest = CurationEngine(store).generate_digest(max_items=0, now=FIXED_NOW)
        assert digest.max_items == 25

    def test_config_defaults(self, store: StateStore) -> None:
        """Test configured defaults are used when no override is given."""
        config = CurationConfig(window_hours=6, max_items=3, title="Brief")

        digest = CurationEngine(store, config).generate_digest(now=FIXED_NOW)

        assert digest.window == "6h"
        assert digest.max_items == 3
        assert digest.title == "Brief"

    def test_persists_scores(self, store: StateStore) -> None:
        """Test selected items have their score written back."""
        _ingest(store, make_item("Story", url="https://a.com"))

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        (stored,) = store.list_items(ItemFilter())
        assert stored.computed_score == pytest.approx(digest.items[0].computed_score)
        assert stored.computed_score > 0

    def test_sections_and_meta(self, store: StateStore) -> None:
        """Test sections group selected items by source."""
        _ingest(
            store,
            make_item("A1", url="https://a1.com", source="A", age=timedelta(hours=1)),
            make_item("B1", url="https://b1.com", source="B", age=timedelta(hours=2)),
            make_item("A2", url="https://a2.com", source="A", age=timedelta(hours=3)),
        )

        digest = CurationEngine(store).generate_digest(now=FIXED_NOW)

        assert [s.name for s in digest.sections] == ["A", "B"]
        assert len(digest.sections[0].item_ids) == 2
        assert digest.meta.sources_synced == 2

    def test_records_metrics(self, store: StateStore) -> None:
        """Test generation metrics are recorded."""
        _ingest(
            store,
            make_item("Dup", url="https://a.com", source="A", age=timedelta(hours=2)),
            make_item("Dup", url="https://a.com", source="B", age=timedelta(hours=1)),
        )

        CurationEngine(store).generate_digest(now=FIXED_NOW)

        metrics = CurationMetrics.get_instance()
        assert metrics.digests_generated == 1
        assert metrics.items_in == 2
        assert metrics.items_out == 1
        assert metrics.deduped_by_strategy["fingerprint"] == 1

    def test_storage_failure(self, tmp_path: Path) -> None:
        """Test a failing storage read aborts generation."""
        disconnected = StateStore(tmp_path / "never-opened.db")

        with pytest.raises(DigestGenerationError, match="Failed to load items"):
            CurationEngine(disconnected).generate_digest(now=FIXED_NOW)
