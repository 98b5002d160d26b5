"""Content hashing for item identity.

Every item gets a deterministic identity derived from its canonical URL, or
from a title/source fallback key when it has no link.
"""

import hashlib
from datetime import datetime

from newsbrew.canonical.url import canonicalize_url


FINGERPRINT_PREFIX = "sha256:"
ID_LENGTH = 12


def _sha256_hex(seed: str) -> str:
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def fingerprint(canonical_url: str) -> str:
    """Compute the self-describing fingerprint of a canonical URL.

    Args:
        canonical_url: Canonical URL (or fallback key).

    Returns:
        ``sha256:`` followed by the 64 character hex digest.
    """
    return FINGERPRINT_PREFIX + _sha256_hex(canonical_url)


def generate_id(seed: str) -> str:
    """Compute a short item identifier.

    Args:
        seed: Canonical URL or fallback key.

    Returns:
        First 12 hex characters of the SHA-256 digest.
    """
    return _sha256_hex(seed)[:ID_LENGTH]


def fallback_key(title: str, source_name: str) -> str:
    """Build the identity key used when an item has no URL.

    Args:
        title: Item title.
        source_name: Name of the source the item came from.

    Returns:
        ``title||source_name``.
    """
    return f"{title}||{source_name}"


def identity_seed(url: str, title: str, source_name: str) -> tuple[str, str]:
    """Resolve the canonical URL and identity seed for an item.

    Args:
        url: Raw item URL, possibly empty.
        title: Item title.
        source_name: Source display name.

    Returns:
        Tuple of (canonical_url, seed). The seed is the canonical URL when
        one exists, otherwise the fallback key.
    """
    canonical = canonicalize_url(url)
    if canonical:
        return canonical, canonical
    return "", fallback_key(title, source_name)


def compute_content_hash(
    title: str,
    url: str,
    published_at: datetime | None = None,
    extra: dict[str, str] | None = None,
) -> str:
    """Compute a hash over the mutable content of an item.

    Used by the store to tell an unchanged re-ingest from an update.

    Args:
        title: Item title.
        url: Item URL.
        published_at: Optional publication timestamp.
        extra: Optional extra fields to include in the hash.

    Returns:
        First 16 characters of the SHA-256 digest of the normalized content.
    """
    parts = [
        f"title:{title.strip()}",
        f"url:{url}",
    ]

    if published_at:
        parts.append(f"published_at:{published_at.isoformat()}")

    if extra:
        for key, value in sorted(extra.items()):
            parts.append(f"{key}:{value}")

    return _sha256_hex("\n".join(parts))[:16]
