"""URL canonicalization utilities.

Canonical URLs are the basis of item identity: two raw links that only
differ by tracking parameters, fragment, trailing slash or the case of the
scheme and host collapse to the same canonical form.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


# Query parameters that carry tracking information only
TRACKING_PARAMS: frozenset[str] = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "ref",
        "source",
        "fbclid",
        "gclid",
    }
)


def canonicalize_url(raw_url: str) -> str:
    """Canonicalize a URL for identity and deduplication.

    Canonicalization includes:
    - Lowercasing the scheme and host
    - Stripping tracking query parameters
    - Removing the fragment
    - Removing a trailing slash (except for the root path)

    Remaining query parameters are sorted by key so that the output is
    deterministic regardless of the original parameter order.

    Args:
        raw_url: The URL to canonicalize.

    Returns:
        Canonical URL string. Empty input yields an empty string and URLs
        that cannot be parsed are returned unchanged.
    """
    if not raw_url:
        return ""

    try:
        parts = urlsplit(raw_url)
        # Accessing port validates it
        _ = parts.port
    except ValueError:
        return raw_url

    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()

    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"

    query = _strip_tracking_params(parts.query)

    return urlunsplit((scheme, netloc, path, query, ""))


def extract_domain(raw_url: str) -> str:
    """Extract the host of a URL without a leading ``www.``.

    Args:
        raw_url: URL to inspect.

    Returns:
        Host name, or empty string when the URL is blank or unparseable.
    """
    if not raw_url:
        return ""

    try:
        host = urlsplit(raw_url).hostname or ""
    except ValueError:
        return ""

    return host.removeprefix("www.")


def _strip_tracking_params(query: str) -> str:
    """Remove tracking parameters from a query string.

    Args:
        query: Original query string.

    Returns:
        Filtered query string with keys sorted.
    """
    if not query:
        return ""

    pairs = parse_qsl(query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if key not in TRACKING_PARAMS]

    if not kept:
        return ""

    kept.sort(key=lambda pair: pair[0])
    return urlencode(kept)
