"""URL canonicalization and content identity."""

from newsbrew.canonical.hash import (
    FINGERPRINT_PREFIX,
    ID_LENGTH,
    compute_content_hash,
    fallback_key,
    fingerprint,
    generate_id,
    identity_seed,
)
from newsbrew.canonical.url import (
    TRACKING_PARAMS,
    canonicalize_url,
    extract_domain,
)


__all__ = [
    "FINGERPRINT_PREFIX",
    "ID_LENGTH",
    "TRACKING_PARAMS",
    "canonicalize_url",
    "compute_content_hash",
    "extract_domain",
    "fallback_key",
    "fingerprint",
    "generate_id",
    "identity_seed",
]
