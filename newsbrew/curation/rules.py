"""User mute and boost rules.

Mutes remove items outright; boosts never remove anything and are
returned separately for the scorer. Patterns and item fields are compared
lowercased, as exact matches.
"""

from collections.abc import Sequence

from newsbrew.canonical import extract_domain
from newsbrew.data_model import CanonicalItem
from newsbrew.store.models import Rule, RuleKind


DEFAULT_BOOST_MULTIPLIER = 2.0


def apply_rules(
    items: Sequence[CanonicalItem],
    rules: Sequence[Rule],
    boost_multiplier: float = DEFAULT_BOOST_MULTIPLIER,
) -> tuple[list[CanonicalItem], dict[str, float]]:
    """Drop muted items and collect boost patterns.

    Args:
        items: Candidate items.
        rules: User rules; disabled rules are ignored.
        boost_multiplier: Multiplier assigned to every boost pattern.

    Returns:
        Tuple of (surviving items in input order, boost map keyed by
        lowercased pattern).
    """
    muted_domains: set[str] = set()
    muted_sources: set[str] = set()
    boosts: dict[str, float] = {}

    for rule in rules:
        if not rule.enabled:
            continue
        pattern = rule.pattern.strip().lower()
        if not pattern:
            continue
        if rule.kind == RuleKind.MUTE_DOMAIN:
            muted_domains.add(pattern)
        elif rule.kind == RuleKind.MUTE_SOURCE:
            muted_sources.add(pattern)
        elif rule.kind in (RuleKind.BOOST_TAG, RuleKind.BOOST_DOMAIN):
            boosts[pattern] = boost_multiplier

    surviving: list[CanonicalItem] = []
    for item in items:
        if muted_domains and extract_domain(item.url).lower() in muted_domains:
            continue
        if muted_sources and item.source.name.lower() in muted_sources:
            continue
        surviving.append(item)

    return surviving, boosts


def count_applied_rules(
    original_count: int, surviving_count: int, boosts: dict[str, float]
) -> int:
    """Count mute events plus distinct active boost patterns."""
    return (original_count - surviving_count) + len(boosts)
