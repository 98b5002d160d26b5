"""Unit tests for mute and boost rules."""

from newsbrew.curation import apply_rules, count_applied_rules
from newsbrew.store import Rule, RuleKind
from tests.helpers.items import make_item


def _rule(rule_id: int, kind: RuleKind, pattern: str, enabled: bool = True) -> Rule:
    return Rule(id=rule_id, kind=kind, pattern=pattern, enabled=enabled)


class TestApplyRules:
    """Tests for apply_rules."""

    def test_mute_domain(self) -> None:
        """Test items linking to a muted domain are removed."""
        items = [
            make_item("Keep", url="https://good.com/a"),
            make_item("Drop", url="https://www.spam.com/b"),
            make_item("Also keep", url="https://blog.spam.com/c"),
        ]

        surviving, boosts = apply_rules(
            items, [_rule(1, RuleKind.MUTE_DOMAIN, "Spam.com")]
        )

        assert [i.title for i in surviving] == ["Keep", "Also keep"]
        assert boosts == {}

    def test_mute_source_case_insensitive(self) -> None:
        """Test source mutes ignore case."""
        items = [
            make_item("A", url="https://a.com", source="Reddit"),
            make_item("B", url="https://b.com", source="Lobsters"),
        ]

        surviving, _ = apply_rules(items, [_rule(1, RuleKind.MUTE_SOURCE, "reddit")])

        assert [i.title for i in surviving] == ["B"]

    def test_boosts_never_remove(self) -> None:
        """Test boost rules only produce multipliers."""
        items = [make_item("A", url="https://a.com", tags=["rust"])]
        rules = [
            _rule(1, RuleKind.BOOST_TAG, "Rust"),
            _rule(2, RuleKind.BOOST_DOMAIN, "Hacker News"),
        ]

        surviving, boosts = apply_rules(items, rules, boost_multiplier=3.0)

        assert surviving == items
        assert boosts == {"rust": 3.0, "hacker news": 3.0}

    def test_disabled_rules_ignored(self) -> None:
        """Test disabled rules have no effect."""
        items = [make_item("A", url="https://spam.com/a")]
        rules = [
            _rule(1, RuleKind.MUTE_DOMAIN, "spam.com", enabled=False),
            _rule(2, RuleKind.BOOST_TAG, "ai", enabled=False),
        ]

        surviving, boosts = apply_rules(items, rules)

        assert surviving == items
        assert boosts == {}

    def test_blank_pattern_ignored(self) -> None:
        """Test whitespace patterns match nothing."""
        items = [make_item("A", url="")]

        surviving, boosts = apply_rules(items, [_rule(1, RuleKind.MUTE_DOMAIN, " ")])

        assert surviving == items
        assert boosts == {}

    def test_preserves_order(self) -> None:
        """Test survivors keep input order."""
        items = [make_item(f"T{n}", url=f"https://site{n}.com") for n in range(5)]

        surviving, _ = apply_rules(items, [_rule(1, RuleKind.MUTE_DOMAIN, "site2.com")])

        assert [i.title for i in surviving] == ["T0", "T1", "T3", "T4"]


class TestCountAppliedRules:
    """Tests for count_applied_rules."""

    def test_mutes_plus_boosts(self) -> None:
        """Test muted items and distinct boost patterns both count."""
        assert count_applied_rules(10, 7, {"a": 2.0, "b": 2.0}) == 5

    def test_nothing_applied(self) -> None:
        """Test zero when no rule had an effect."""
        assert count_applied_rules(4, 4, {}) == 0
