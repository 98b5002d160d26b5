"""Unit tests for composite scoring."""

import math
from datetime import timedelta

import pytest

from newsbrew.config.schemas import ScoringConfig
from newsbrew.curation import Scorer
from newsbrew.data_model import Engagement
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


@pytest.fixture
def scorer() -> Scorer:
    """Scorer with default parameters at the fixed instant."""
    return Scorer(now=FIXED_NOW)


class TestRecencyFactor:
    """Tests for the recency factor."""

    def test_fresh_item(self, scorer: Scorer) -> None:
        """Test an item published now scores one."""
        assert scorer.recency_factor(FIXED_NOW) == 1.0

    def test_decay(self, scorer: Scorer) -> None:
        """Test one decay period yields 1/e."""
        assert scorer.recency_factor(FIXED_NOW - timedelta(hours=24)) == pytest.approx(
            math.exp(-1)
        )

    def test_floor(self, scorer: Scorer) -> None:
        """Test old items never fall below the floor."""
        assert scorer.recency_factor(FIXED_NOW - timedelta(days=60)) == 0.1

    def test_future_counts_as_fresh(self, scorer: Scorer) -> None:
        """Test future timestamps are treated as age zero."""
        assert scorer.recency_factor(FIXED_NOW + timedelta(hours=5)) == 1.0

    def test_configurable_decay(self) -> None:
        """Test the decay period is configurable."""
        fast = Scorer(ScoringConfig(recency_decay_hours=6.0), now=FIXED_NOW)
        assert fast.recency_factor(FIXED_NOW - timedelta(hours=6)) == pytest.approx(
            math.exp(-1)
        )


class TestEngagementFactor:
    """Tests for the engagement factor."""

    @pytest.mark.parametrize("engagement", [None, Engagement(), Engagement(points=0)])
    def test_neutral_without_signal(
        self, scorer: Scorer, engagement: Engagement | None
    ) -> None:
        """Test missing or zero engagement is neutral."""
        assert scorer.engagement_factor(engagement) == 1.0

    def test_normalization_cap(self, scorer: Scorer) -> None:
        """Test the normalization cap maps to one."""
        assert scorer.engagement_factor(Engagement(points=500)) == pytest.approx(1.0)

    def test_stars_count_as_points(self, scorer: Scorer) -> None:
        """Test the larger of points and stars is used."""
        assert scorer.engagement_factor(Engagement(stars=500, points=3)) == pytest.approx(
            1.0
        )

    def test_comments_weighted(self, scorer: Scorer) -> None:
        """Test comments contribute at half weight."""
        assert scorer.engagement_factor(Engagement(comments=1000)) == pytest.approx(1.0)

    def test_score_cap(self, scorer: Scorer) -> None:
        """Test huge engagement is capped."""
        assert scorer.engagement_factor(Engagement(points=10**9)) == 2.0

    def test_small_signal_below_neutral(self, scorer: Scorer) -> None:
        """Test little engagement pulls the score down."""
        assert scorer.engagement_factor(Engagement(points=5)) < 1.0


class TestBoostFactor:
    """Tests for the boost factor."""

    def test_no_boosts(self, scorer: Scorer) -> None:
        """Test an empty boost map is neutral."""
        assert scorer.boost_factor(make_item(tags=["ai"]), {}) == 1.0

    def test_tag_match_case_insensitive(self, scorer: Scorer) -> None:
        """Test tags are compared lowercased."""
        assert scorer.boost_factor(make_item(tags=["LLM"]), {"llm": 2.0}) == 2.0

    def test_source_name_match(self, scorer: Scorer) -> None:
        """Test the source name is checked after tags."""
        item = make_item(source="Lobsters", tags=["rust"])
        assert scorer.boost_factor(item, {"lobsters": 3.0}) == 3.0

    def test_tags_win_over_source(self, scorer: Scorer) -> None:
        """Test the first matching tag wins over the source."""
        item = make_item(source="Lobsters", tags=["go", "rust"])
        boosts = {"rust": 2.5, "go": 1.5, "lobsters": 4.0}
        assert scorer.boost_factor(item, boosts) == 1.5

    def test_no_match(self, scorer: Scorer) -> None:
        """Test unmatched items are neutral."""
        assert scorer.boost_factor(make_item(tags=["go"]), {"rust": 2.0}) == 1.0


class TestScore:
    """Tests for the composite score."""

    def test_multiplicative(self, scorer: Scorer) -> None:
        """Test all factors multiply."""
        item = make_item(
            age=timedelta(0),
            tags=["ai"],
            engagement=Engagement(points=500),
        )

        (scored,) = scorer.score([item], {"Hacker News": 1.5}, {"ai": 2.0})

        assert scored.computed_score == pytest.approx(3.0)

    def test_missing_weight_is_neutral(self, scorer: Scorer) -> None:
        """Test sources without a weight count as one."""
        (scored,) = scorer.score([make_item(age=timedelta(0))])
        assert scored.computed_score == 1.0

    def test_zero_weight(self, scorer: Scorer) -> None:
        """Test a zero weight zeroes the score."""
        (scored,) = scorer.score([make_item()], {"Hacker News": 0.0})
        assert scored.computed_score == 0.0

    def test_returns_copies_in_order(self, scorer: Scorer) -> None:
        """Test inputs are untouched and order is kept."""
        items = [
            make_item("Old", url="https://a.com", age=timedelta(hours=48)),
            make_item("New", url="https://b.com", age=timedelta(hours=1)),
        ]

        scored = scorer.score(items)

        assert [i.title for i in scored] == ["Old", "New"]
        assert all(i.computed_score == 0.0 for i in items)
        assert scored[0].computed_score < scored[1].computed_score
