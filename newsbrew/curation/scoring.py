"""Composite relevance scoring.

    score = recency × source_weight × engagement × user_boost

All factors are multiplicative; none is additive.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from newsbrew.config.schemas.curation import ScoringConfig
from newsbrew.curation.constants import NEUTRAL_FACTOR
from newsbrew.data_model import CanonicalItem, Engagement


class Scorer:
    """Computes ``computed_score`` for items at a fixed reference instant."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the scorer.

        Args:
            config: Scoring parameters.
            now: Reference instant for recency (defaults to now).
        """
        self._config = config or ScoringConfig()
        now = now or datetime.now(UTC)
        self._now = now if now.tzinfo else now.replace(tzinfo=UTC)

    def score(
        self,
        items: Sequence[CanonicalItem],
        source_weights: Mapping[str, float] | None = None,
        boosts: Mapping[str, float] | None = None,
    ) -> list[CanonicalItem]:
        """Return copies of the items carrying their computed score.

        Args:
            items: Items to score.
            source_weights: Multiplier per source name; missing means 1.0.
            boosts: Boost map from the rule filter.

        Returns:
            Scored items in input order.
        """
        weights = source_weights or {}
        boost_map = boosts or {}
        return [
            item.with_score(self.compute_score(item, weights, boost_map))
            for item in items
        ]

    def compute_score(
        self,
        item: CanonicalItem,
        source_weights: Mapping[str, float],
        boosts: Mapping[str, float],
    ) -> float:
        """Compute the composite score of one item."""
        return (
            self.recency_factor(item.published_at)
            * source_weights.get(item.source.name, NEUTRAL_FACTOR)
            * self.engagement_factor(item.engagement)
            * self.boost_factor(item, boosts)
        )

    def recency_factor(self, published_at: datetime) -> float:
        """Exponential decay by age, floored; future timestamps count as age 0."""
        age_hours = max(0.0, (self._now - published_at).total_seconds() / 3600)
        score = math.exp(-age_hours / self._config.recency_decay_hours)
        return max(score, self._config.recency_floor)

    def engagement_factor(self, engagement: Engagement | None) -> float:
        """Log-normalized engagement, neutral when no signal exists."""
        if engagement is None or engagement.is_empty:
            return NEUTRAL_FACTOR

        signal = float(max(engagement.points or 0, engagement.stars or 0))
        signal += self._config.comment_weight * (engagement.comments or 0)
        if signal <= 0:
            return NEUTRAL_FACTOR

        cap = self._config.engagement_normalization_cap
        score = math.log1p(signal) / math.log1p(cap)
        return min(score, self._config.engagement_score_cap)

    def boost_factor(self, item: CanonicalItem, boosts: Mapping[str, float]) -> float:
        """First matching boost: tags first, then the source name."""
        if not boosts:
            return NEUTRAL_FACTOR
        for tag in item.tags:
            boost = boosts.get(tag.lower())
            if boost is not None:
                return boost
        return boosts.get(item.source.name.lower(), NEUTRAL_FACTOR)
