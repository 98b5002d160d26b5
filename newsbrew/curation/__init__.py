"""Curation pipeline: rule filter, dedup, scoring and diversity selection."""

from newsbrew.curation.dedup import (
    STRATEGY_CONFIDENCE,
    DedupMatch,
    DedupStrategy,
    Deduplicator,
    normalize_title,
    titles_match,
)
from newsbrew.curation.diversity import enforce_diversity, source_cap
from newsbrew.curation.engine import CurationEngine, build_sections, format_window
from newsbrew.curation.errors import CurationError, DigestGenerationError
from newsbrew.curation.metrics import CurationMetrics
from newsbrew.curation.models import Digest, DigestMeta, DigestSection
from newsbrew.curation.rules import apply_rules, count_applied_rules
from newsbrew.curation.scoring import Scorer


__all__ = [
    "STRATEGY_CONFIDENCE",
    "CurationEngine",
    "CurationError",
    "CurationMetrics",
    "DedupMatch",
    "DedupStrategy",
    "Deduplicator",
    "Digest",
    "DigestGenerationError",
    "DigestMeta",
    "DigestSection",
    "Scorer",
    "apply_rules",
    "build_sections",
    "count_applied_rules",
    "enforce_diversity",
    "format_window",
    "normalize_title",
    "source_cap",
    "titles_match",
]
