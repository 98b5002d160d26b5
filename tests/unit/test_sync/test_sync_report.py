"""Unit tests for sync report models, rendering and metrics."""

from datetime import timedelta

from newsbrew.sync import SourceSyncResult, SyncMetrics, SyncReport, format_sync_report
from tests.helpers.time import FIXED_NOW


def _report(*results: SourceSyncResult) -> SyncReport:
    return SyncReport(
        run_id="run-1",
        started_at=FIXED_NOW,
        finished_at=FIXED_NOW + timedelta(seconds=2),
        results=list(results),
    )


HN = SourceSyncResult(
    name="Hacker News",
    key="hn",
    items_fetched=10,
    items_inserted=6,
    items_updated=1,
    items_unchanged=3,
)
LOBSTERS = SourceSyncResult(
    name="Lobsters",
    key="lobsters",
    items_fetched=5,
    items_inserted=4,
    items_unchanged=0,
    items_failed=1,
)
REDDIT = SourceSyncResult(
    name="Reddit", key="reddit", error="HTTP_5XX failure", error_class="FETCH"
)


class TestSyncReport:
    """Tests for SyncReport aggregates."""

    def test_totals(self) -> None:
        """Test totals sum over sources."""
        report = _report(HN, LOBSTERS, REDDIT)

        assert report.total_inserted == 10
        assert report.total_updated == 1
        assert report.total_unchanged == 3
        assert report.total_failed_items == 1
        assert report.sources_succeeded == 2
        assert report.sources_failed == 1
        assert report.success is True
        assert report.duration_ms == 2000

    def test_all_failed(self) -> None:
        """Test a report with only failures is unsuccessful."""
        assert _report(REDDIT).success is False
        assert _report().success is False

    def test_get_by_key(self) -> None:
        """Test results are looked up by configured key."""
        report = _report(HN, REDDIT)
        assert report.get("reddit") is REDDIT
        assert report.get("missing") is None

    def test_source_success(self) -> None:
        """Test a source without error is successful even with no items."""
        assert SourceSyncResult(name="Empty", key="empty").success is True
        assert REDDIT.success is False


class TestFormatSyncReport:
    """Tests for format_sync_report."""

    def test_lines(self) -> None:
        """Test one line per source and a summary line."""
        text = format_sync_report(_report(HN, LOBSTERS, REDDIT))

        assert text.splitlines() == [
            "  ✓ Hacker News: 6 new, 1 updated, 3 unchanged",
            "  ✓ Lobsters: 4 new, 0 updated, 0 unchanged (1 failed)",
            "  ✗ Reddit: HTTP_5XX failure",
            "",
            "Synced 10 new items from 2 sources (1 errors)",
        ]

    def test_no_errors(self) -> None:
        """Test the error count is omitted when nothing failed."""
        text = format_sync_report(_report(HN))
        assert text.endswith("Synced 6 new items from 1 sources")


class TestSyncMetrics:
    """Tests for SyncMetrics."""

    def test_singleton(self) -> None:
        """Test the instance is shared until reset."""
        first = SyncMetrics.get_instance()
        assert SyncMetrics.get_instance() is first
        SyncMetrics.reset()
        assert SyncMetrics.get_instance() is not first

    def test_counters(self) -> None:
        """Test item, failure and cycle counters."""
        metrics = SyncMetrics.get_instance()
        metrics.record_items("Hacker News", 3)
        metrics.record_items("Hacker News", 2)
        metrics.record_failure("Reddit", "FETCH")
        metrics.record_failure("Reddit", "TIMEOUT")
        metrics.record_failure("Lobsters", "PARSE")
        metrics.record_duration("Reddit", 12.5)
        metrics.record_cycle()

        assert metrics.items_by_source["Hacker News"] == 5
        assert metrics.total_items == 5
        assert metrics.get_failures_total() == 3
        assert metrics.get_failures_total("Reddit") == 2
        assert metrics.duration_by_source["Reddit"] == 12.5

        snapshot = metrics.to_dict()
        assert snapshot["total_cycles"] == 1
        assert snapshot["failures_by_source"] == {
            "Lobsters:PARSE": 1,
            "Reddit:FETCH": 1,
            "Reddit:TIMEOUT": 1,
        }
