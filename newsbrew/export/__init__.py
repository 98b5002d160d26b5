"""NDJSON export and plain-text printing."""

from newsbrew.export.ndjson import (
    decode_digest,
    decode_items,
    digest_to_json,
    encode_digest,
    encode_items,
)
from newsbrew.export.sanitize import sanitize_text
from newsbrew.export.text import format_age, format_digest_text, format_item_line


__all__ = [
    "decode_digest",
    "decode_items",
    "digest_to_json",
    "encode_digest",
    "encode_items",
    "format_age",
    "format_digest_text",
    "format_item_line",
    "sanitize_text",
]
