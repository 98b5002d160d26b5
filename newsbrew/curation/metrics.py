"""Metrics collection for digest generation."""

from collections import Counter
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class CurationMetrics:
    """Metrics for the most recent digest generations.

    Attributes:
        items_in: Items loaded from storage.
        items_out: Items selected into the digest.
        items_muted: Items removed by mute rules.
        deduped_by_strategy: Collapsed pairs per dedup strategy.
        score_values: Scores of selected items for percentile calculation.
        digests_generated: Number of completed generations.
        generation_duration_ms: Duration of the last generation.
    """

    items_in: int = 0
    items_out: int = 0
    items_muted: int = 0
    deduped_by_strategy: Counter[str] = field(default_factory=Counter)
    score_values: list[float] = field(default_factory=list)
    digests_generated: int = 0
    generation_duration_ms: float = 0.0

    _instance: ClassVar["CurationMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "CurationMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_generation(  # noqa: PLR0913
        self,
        items_in: int,
        items_out: int,
        items_muted: int,
        dedup_strategies: list[str],
        scores: list[float],
        duration_ms: float,
    ) -> None:
        """Record one digest generation."""
        self.items_in = items_in
        self.items_out = items_out
        self.items_muted = items_muted
        self.deduped_by_strategy.update(dedup_strategies)
        self.score_values = list(scores)
        self.generation_duration_ms = duration_ms
        self.digests_generated += 1

    def get_score_percentile(self, percentile: float) -> float:
        """Get score at a given percentile.

        Args:
            percentile: Percentile (0-100).

        Returns:
            Score value at percentile, or 0.0 without scores.
        """
        if not self.score_values:
            return 0.0
        sorted_scores = sorted(self.score_values)
        idx = int(len(sorted_scores) * percentile / 100)
        idx = min(idx, len(sorted_scores) - 1)
        return sorted_scores[idx]

    def to_dict(self) -> dict[str, object]:
        """Snapshot the metrics for logging."""
        return {
            "items_in": self.items_in,
            "items_out": self.items_out,
            "items_muted": self.items_muted,
            "deduped_by_strategy": dict(self.deduped_by_strategy),
            "score_p50": round(self.get_score_percentile(50), 4),
            "score_p90": round(self.get_score_percentile(90), 4),
            "digests_generated": self.digests_generated,
            "generation_duration_ms": round(self.generation_duration_ms, 2),
        }
