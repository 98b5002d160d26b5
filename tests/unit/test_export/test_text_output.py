"""Unit tests for plain-text printers and sanitization."""

from datetime import timedelta

import pytest

from newsbrew.curation import Digest, DigestMeta
from newsbrew.data_model import ItemState
from newsbrew.export import (
    format_age,
    format_digest_text,
    format_item_line,
    sanitize_text,
)
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


class TestSanitizeText:
    """Tests for sanitize_text."""

    def test_strips_escape_sequences(self) -> None:
        """Test ESC and other control characters are removed."""
        assert sanitize_text("\x1b[31mred\x1b[0m") == "[31mred[0m"

    def test_keeps_tab_newline_and_unicode(self) -> None:
        """Test printable text, tabs and newlines survive."""
        assert sanitize_text("a\tb\nc ☕ é") == "a\tb\nc ☕ é"

    @pytest.mark.parametrize("char", ["\x00", "\x07", "\x0b", "\x7f", "\x9b"])
    def test_removes_controls(self, char: str) -> None:
        """Test C0, DEL and C1 controls are removed."""
        assert sanitize_text(f"x{char}y") == "xy"

    def test_empty(self) -> None:
        """Test empty input."""
        assert sanitize_text("") == ""


class TestFormatAge:
    """Tests for format_age."""

    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (timedelta(seconds=30), "0m"),
            (timedelta(minutes=5), "5m"),
            (timedelta(hours=3, minutes=59), "3h"),
            (timedelta(days=2, hours=1), "2d"),
            (timedelta(hours=-2), "0m"),
        ],
    )
    def test_ages(self, age: timedelta, expected: str) -> None:
        """Test the age unit boundaries."""
        assert format_age(FIXED_NOW - age, FIXED_NOW) == expected


class TestFormatItemLine:
    """Tests for format_item_line."""

    def test_unread(self) -> None:
        """Test an unread item line."""
        item = make_item("Story", url="https://a.com", age=timedelta(hours=2))

        line = format_item_line(item, FIXED_NOW)

        assert line == f"  {item.id[:8]}  Story  [Hacker News · 2h]"

    @pytest.mark.parametrize(
        ("state", "marker"), [(ItemState.READ, "✓"), (ItemState.SAVED, "★")]
    )
    def test_state_markers(self, state: ItemState, marker: str) -> None:
        """Test read and saved markers."""
        item = make_item(state=state)
        assert format_item_line(item, FIXED_NOW).startswith(f"{marker} ")

    def test_sanitizes_title(self) -> None:
        """Test control characters in titles are removed."""
        item = make_item("Evil\x1b]0;title\x07", url="https://a.com")
        assert "\x1b" not in format_item_line(item, FIXED_NOW)


class TestFormatDigestText:
    """Tests for format_digest_text."""

    def _digest(self) -> Digest:
        hot = make_item(
            "Hot story", url="https://a.com/hot", summary="x" * 200
        ).with_score(8.0)
        cold = make_item("Cold story", url="", source="Lobsters", icon="🦞").with_score(0.5)
        return Digest(
            generated_at=FIXED_NOW,
            title="Daily Brew",
            window="24h",
            max_items=25,
            item_count=2,
            items=[hot, cold],
            meta=DigestMeta(
                sources_synced=2, items_considered=5, items_deduped=1, rules_applied=2
            ),
        )

    def test_header_and_footer(self) -> None:
        """Test the title line, stats line and summary footer."""
        lines = format_digest_text(self._digest()).splitlines()

        assert lines[0] == "☕ Daily Brew"
        assert lines[1] == "   Jun 13, 12:00 UTC | 2 items | 2 sources | window 24h"
        assert lines[-1] == "5 considered, 1 deduped, 2 rules applied"

    def test_item_blocks(self) -> None:
        """Test each item shows rank, marker, summary and source."""
        text = format_digest_text(self._digest())

        assert "  🔥  1. Hot story" in text
        assert "       " + "x" * 117 + "..." in text
        assert "       🔶 Hacker News · https://a.com/hot" in text
        assert "      2. Cold story" in text
        assert "       🦞 Lobsters\n" in text

    def test_empty_digest(self) -> None:
        """Test an empty digest still renders header and footer."""
        digest = Digest(
            generated_at=FIXED_NOW, title="Empty", window="24h", max_items=5, item_count=0
        )

        lines = format_digest_text(digest).splitlines()

        assert lines[0] == "☕ Empty"
        assert lines[-1] == "0 considered, 0 deduped, 0 rules applied"
