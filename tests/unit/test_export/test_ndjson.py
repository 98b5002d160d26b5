"""Unit tests for NDJSON encoding."""

import io
import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from newsbrew.curation import Digest, DigestMeta, DigestSection
from newsbrew.data_model import Engagement
from newsbrew.export import (
    decode_digest,
    decode_items,
    digest_to_json,
    encode_digest,
    encode_items,
)
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


def _digest() -> Digest:
    item = make_item("Café <b>news</b>", url="https://example.com/a?x=1&y=2")
    return Digest(
        generated_at=FIXED_NOW,
        title="Daily Brew",
        window="24h",
        max_items=25,
        item_count=1,
        items=[item],
        sections=[DigestSection(name="Hacker News", icon="🔶", item_ids=[item.id])],
        meta=DigestMeta(sources_synced=1, items_considered=3, items_deduped=1),
    )


class TestEncodeItems:
    """Tests for encode_items."""

    def test_one_line_per_item(self) -> None:
        """Test each item becomes one JSON object line."""
        items = [
            make_item("One", url="https://a.com"),
            make_item("Two", url="https://b.com", engagement=Engagement(points=3)),
        ]
        buffer = io.StringIO()

        count = encode_items(items, buffer)

        lines = buffer.getvalue().splitlines()
        assert count == 2
        assert len(lines) == 2
        assert json.loads(lines[0])["title"] == "One"
        assert json.loads(lines[1])["engagement"]["points"] == 3
        assert buffer.getvalue().endswith("\n")

    def test_no_escaping(self) -> None:
        """Test non-ASCII and HTML characters are written verbatim."""
        buffer = io.StringIO()

        encode_items([make_item("Café <b> & ☕", url="https://a.com/?q=1&r=2")], buffer)

        text = buffer.getvalue()
        assert "Café <b> & ☕" in text
        assert "https://a.com/?q=1&r=2" in text
        assert "\\u" not in text

    def test_field_names(self) -> None:
        """Test the wire field names."""
        buffer = io.StringIO()
        encode_items([make_item()], buffer)

        record = json.loads(buffer.getvalue())

        assert set(record) >= {
            "id",
            "fingerprint",
            "title",
            "url",
            "canonical_url",
            "source",
            "published_at",
            "fetched_at",
            "tags",
            "raw_score",
            "computed_score",
            "state",
        }
        assert record["source"] == {"name": "Hacker News", "icon": "🔶"}
        assert record["state"] == "unread"

    def test_empty(self) -> None:
        """Test no items writes nothing."""
        buffer = io.StringIO()
        assert encode_items([], buffer) == 0
        assert buffer.getvalue() == ""


class TestDecodeItems:
    """Tests for decode_items."""

    def test_reads_back(self) -> None:
        """Test encoded items decode to equal models."""
        items = [
            make_item("One", url="https://a.com", tags=["x"]),
            make_item("Two", url="", age=timedelta(hours=5)),
        ]
        buffer = io.StringIO()
        encode_items(items, buffer)

        assert decode_items(io.StringIO(buffer.getvalue())) == items

    def test_skips_blank_and_malformed(self) -> None:
        """Test bad lines are skipped instead of aborting."""
        buffer = io.StringIO()
        encode_items([make_item("Good", url="https://a.com")], buffer)
        lines = [
            "",
            "{not json",
            json.dumps({"title": "missing fields"}),
            buffer.getvalue(),
            "   ",
        ]

        decoded = decode_items(lines)

        assert [i.title for i in decoded] == ["Good"]


class TestDigestEncoding:
    """Tests for digest encoding."""

    def test_single_line(self) -> None:
        """Test a digest is one line with its type and version."""
        buffer = io.StringIO()

        encode_digest(_digest(), buffer)

        text = buffer.getvalue()
        assert text.count("\n") == 1
        record = json.loads(text)
        assert record["type"] == "trss-digest"
        assert record["version"] == "1"
        assert record["window"] == "24h"
        assert record["meta"]["items_deduped"] == 1
        assert record["sections"][0]["item_ids"] == [record["items"][0]["id"]]

    def test_digest_to_json(self) -> None:
        """Test the storage form has no trailing newline."""
        payload = digest_to_json(_digest())
        assert not payload.endswith("\n")
        assert "Café <b>news</b>" in payload

    def test_decode_digest(self) -> None:
        """Test a stored digest decodes to an equal model."""
        digest = _digest()
        assert decode_digest(digest_to_json(digest) + "\n") == digest

    def test_decode_wrong_type(self) -> None:
        """Test a payload of another type is rejected."""
        record = json.loads(digest_to_json(_digest()))
        record["type"] = "other"

        with pytest.raises(ValidationError):
            decode_digest(json.dumps(record))
