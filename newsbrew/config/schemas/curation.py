"""Curation pipeline tuning parameters.

The defaults reproduce the reference heuristics; every threshold is
tunable.
"""

from typing import Annotated

from pydantic import Field

from newsbrew.data_model import StrictBaseModel


DEFAULT_TITLE_PREFIXES: tuple[str, ...] = (
    "show hn: ",
    "ask hn: ",
    "tell hn: ",
    "[p] ",
    "[d] ",
)


class DiversityLimits(StrictBaseModel):
    """Maximum concentration from one domain, source or tag in a digest.

    A value of 0 disables the domain or tag cap.
    """

    max_per_domain: Annotated[int, Field(ge=0, le=100)] = 3
    max_source_percent: Annotated[float, Field(gt=0.0, le=1.0)] = 0.4
    max_per_tag_cluster: Annotated[int, Field(ge=0, le=100)] = 3


class ScoringConfig(StrictBaseModel):
    """Parameters of the composite relevance score."""

    recency_decay_hours: Annotated[float, Field(gt=0.0, le=24 * 365)] = 24.0
    recency_floor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    engagement_normalization_cap: Annotated[float, Field(gt=0.0)] = 500.0
    engagement_score_cap: Annotated[float, Field(gt=0.0)] = 2.0
    comment_weight: Annotated[float, Field(ge=0.0, le=10.0)] = 0.5
    boost_multiplier: Annotated[float, Field(ge=1.0, le=100.0)] = 2.0


class DedupConfig(StrictBaseModel):
    """Parameters of fuzzy title matching."""

    title_length_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    title_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TITLE_PREFIXES)
    )


class CurationConfig(StrictBaseModel):
    """Digest generation defaults."""

    window_hours: Annotated[int, Field(ge=1, le=24 * 30)] = 24
    max_items: Annotated[int, Field(ge=1, le=500)] = 25
    title: Annotated[str, Field(min_length=1, max_length=200)] = "Daily Brew"
    diversity: DiversityLimits = Field(default_factory=DiversityLimits)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
