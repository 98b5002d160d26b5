"""Greedy diversity-bounded selection.

Operates on a score-sorted list in a single pass; choices are never
revisited. The checks run in order: domain cap, source share cap, tag
cluster cap.
"""

from collections import Counter
from collections.abc import Sequence

from newsbrew.canonical import extract_domain
from newsbrew.config.schemas.curation import DiversityLimits
from newsbrew.curation.constants import DEFAULT_MAX_ITEMS
from newsbrew.data_model import CanonicalItem


def source_cap(max_items: int, max_source_percent: float) -> int:
    """Maximum items per source, never below one."""
    return max(1, int(max_items * max_source_percent))


def enforce_diversity(
    items: Sequence[CanonicalItem],
    limits: DiversityLimits | None = None,
    max_items: int = DEFAULT_MAX_ITEMS,
) -> list[CanonicalItem]:
    """Pick at most ``max_items`` items honouring the diversity limits.

    Args:
        items: Candidates sorted by descending score.
        limits: Diversity caps; a zero domain or tag cap disables it.
        max_items: Selection size; non-positive values mean the default.

    Returns:
        Accepted items in score order.
    """
    limits = limits or DiversityLimits()
    if max_items <= 0:
        max_items = DEFAULT_MAX_ITEMS
    per_source = source_cap(max_items, limits.max_source_percent)

    domain_counts: Counter[str] = Counter()
    source_counts: Counter[str] = Counter()
    tag_counts: Counter[str] = Counter()
    selected: list[CanonicalItem] = []

    for item in items:
        if len(selected) >= max_items:
            break

        domain = extract_domain(item.url)
        source = item.source.name

        if (
            limits.max_per_domain > 0
            and domain
            and domain_counts[domain] >= limits.max_per_domain
        ):
            continue
        if source_counts[source] >= per_source:
            continue
        if limits.max_per_tag_cluster > 0 and any(
            tag_counts[tag] >= limits.max_per_tag_cluster for tag in item.tags
        ):
            continue

        selected.append(item)
        if domain:
            domain_counts[domain] += 1
        source_counts[source] += 1
        tag_counts.update(item.tags)

    return selected
