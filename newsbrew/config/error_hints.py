"""Remediation hints printed under each configuration error.

A hint is chosen by the last segment of the error location first, then by
the pydantic error type, then a generic fallback.
"""

from typing import Final


_GENERIC_HINT: Final = "See the configuration documentation for accepted values."

_TYPE_GROUPS: Final[tuple[tuple[frozenset[str], str], ...]] = (
    (frozenset({"missing"}), "Required key; add it to the file."),
    (frozenset({"enum", "literal_error"}), "Use one of the documented values."),
    (frozenset({"int_type", "int_parsing"}), "Expected a whole number."),
    (frozenset({"float_type", "float_parsing"}), "Expected a number."),
    (frozenset({"bool_type", "bool_parsing"}), "Expected true or false."),
    (frozenset({"string_type"}), "Expected a string; quote it if needed."),
    (frozenset({"list_type"}), "Expected a YAML list (lines starting with '- ')."),
    (frozenset({"dict_type", "model_type"}), "Expected a mapping of key: value pairs."),
    (frozenset({"extra_forbidden"}), "Unknown key; check its spelling and indentation."),
    (
        frozenset({"greater_than", "greater_than_equal"}),
        "Value is below the allowed minimum.",
    ),
    (frozenset({"less_than", "less_than_equal"}), "Value is above the allowed maximum."),
    (frozenset({"string_too_short"}), "Value is shorter than allowed."),
    (frozenset({"string_too_long"}), "Value is longer than allowed."),
    (
        frozenset({"string_pattern_mismatch"}),
        "Only lowercase letters, digits, '-' and '_' are accepted.",
    ),
    (frozenset({"value_error"}), "The value was rejected; see the message above."),
    (frozenset({"file_not_found"}), "The file does not exist; check --config."),
    (
        frozenset({"yaml_parse_error"}),
        "The file is not valid YAML; check indentation and quoting.",
    ),
)

FIELD_HINTS: Final[dict[str, str]] = {
    "key": "Lowercase letters, digits, '-' and '_' only (e.g. 'hn-search').",
    "driver": (
        "Must be one of: hackernews, hnsearch, github-trending, lobsters, "
        "reddit, arxiv, rss, tldr."
    ),
    "feed_url": "Must be an http(s) URL such as 'https://example.com/feed.xml'.",
    "weight": "Must be between 0.0 and 10.0.",
    "max_items": "Must be between 1 and 500.",
    "window_hours": "Must be between 1 and 720 hours.",
    "max_source_percent": "Must be a fraction greater than 0 and at most 1.0.",
    "timeout_seconds": "Must be a positive number of seconds (at most 600).",
}

ERROR_HINTS: Final[dict[str, str]] = {
    error_type: hint for types, hint in _TYPE_GROUPS for error_type in types
}


def get_error_hint(error_type: str, field_name: str | None = None) -> str:
    """Pick the hint for a pydantic ``error_type`` at dotted ``field_name``."""
    leaf = field_name.rsplit(".", 1)[-1] if field_name else None
    if leaf in FIELD_HINTS:
        return FIELD_HINTS[leaf]
    return ERROR_HINTS.get(error_type, _GENERIC_HINT)


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    line = f"{location}: {message}"
    if not include_hint:
        return line
    return f"{line}\n    Hint: {get_error_hint(error_type, location)}"
