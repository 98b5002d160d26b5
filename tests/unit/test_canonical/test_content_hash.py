"""Unit tests for item identity hashing."""

from datetime import UTC, datetime

from newsbrew.canonical import (
    FINGERPRINT_PREFIX,
    ID_LENGTH,
    compute_content_hash,
    fallback_key,
    fingerprint,
    generate_id,
    identity_seed,
)


class TestIdentity:
    """Tests for id and fingerprint generation."""

    def test_id_is_short_hex(self) -> None:
        """Test ids are 12 lowercase hex characters."""
        item_id = generate_id("https://example.com/a")
        assert len(item_id) == ID_LENGTH
        assert all(c in "0123456789abcdef" for c in item_id)

    def test_fingerprint_format(self) -> None:
        """Test fingerprints carry the algorithm prefix and a full digest."""
        fp = fingerprint("https://example.com/a")
        assert fp.startswith(FINGERPRINT_PREFIX)
        assert len(fp) == len(FINGERPRINT_PREFIX) + 64

    def test_id_is_fingerprint_prefix(self) -> None:
        """Test the id is the leading part of the same digest."""
        seed = "https://example.com/a"
        assert fingerprint(seed).removeprefix(FINGERPRINT_PREFIX).startswith(
            generate_id(seed)
        )

    def test_deterministic(self) -> None:
        """Test the same seed always gives the same identity."""
        assert generate_id("x") == generate_id("x")
        assert generate_id("x") != generate_id("y")

    def test_fallback_key(self) -> None:
        """Test the fallback key joins title and source."""
        assert fallback_key("Title", "Source") == "Title||Source"


class TestIdentitySeed:
    """Tests for identity_seed function."""

    def test_uses_canonical_url(self) -> None:
        """Test linked items are keyed by their canonical URL."""
        canonical, seed = identity_seed(
            "https://Example.com/a/?utm_source=x", "Title", "HN"
        )
        assert canonical == "https://example.com/a"
        assert seed == canonical

    def test_falls_back_without_url(self) -> None:
        """Test link-less items are keyed by title and source."""
        canonical, seed = identity_seed("", "Title", "HN")
        assert canonical == ""
        assert seed == "Title||HN"

    def test_same_title_different_sources_differ(self) -> None:
        """Test link-less items from different sources stay distinct."""
        _, seed_a = identity_seed("", "Title", "A")
        _, seed_b = identity_seed("", "Title", "B")
        assert generate_id(seed_a) != generate_id(seed_b)


class TestComputeContentHash:
    """Tests for compute_content_hash function."""

    def test_length(self) -> None:
        """Test the hash is 16 characters."""
        assert len(compute_content_hash("t", "u")) == 16

    def test_title_whitespace_ignored(self) -> None:
        """Test surrounding whitespace in titles does not change the hash."""
        assert compute_content_hash(" t ", "u") == compute_content_hash("t", "u")

    def test_changes_with_content(self) -> None:
        """Test any content change changes the hash."""
        base = compute_content_hash("t", "u")
        assert compute_content_hash("t2", "u") != base
        assert compute_content_hash("t", "u2") != base
        published = datetime(2025, 1, 1, tzinfo=UTC)
        assert compute_content_hash("t", "u", published) != base
        assert compute_content_hash("t", "u", extra={"summary": "s"}) != base

    def test_extra_order_irrelevant(self) -> None:
        """Test extra fields are hashed in sorted order."""
        a = compute_content_hash("t", "u", extra={"a": "1", "b": "2"})
        b = compute_content_hash("t", "u", extra={"b": "2", "a": "1"})
        assert a == b
