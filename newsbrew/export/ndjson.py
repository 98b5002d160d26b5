"""Line-delimited JSON encoding of items and digests.

UTF-8, one JSON object per line, no escaping of non-ASCII or HTML
characters. Readers skip malformed lines instead of aborting.
"""

import json
from collections.abc import Iterable
from typing import IO

import structlog
from pydantic import BaseModel, ValidationError

from newsbrew.curation.models import Digest
from newsbrew.data_model import CanonicalItem


logger = structlog.get_logger()


def _encode_line(model: BaseModel) -> str:
    return json.dumps(model.model_dump(mode="json"), ensure_ascii=False) + "\n"


def encode_items(items: Iterable[CanonicalItem], stream: IO[str]) -> int:
    """Write one line per item.

    Args:
        items: Items to encode.
        stream: Text stream to write to.

    Returns:
        Number of lines written.
    """
    count = 0
    for item in items:
        stream.write(_encode_line(item))
        count += 1
    return count


def encode_digest(digest: Digest, stream: IO[str]) -> None:
    """Write a digest as a single line."""
    stream.write(_encode_line(digest))


def digest_to_json(digest: Digest) -> str:
    """Serialize a digest without the trailing newline (for storage)."""
    return _encode_line(digest).rstrip("\n")


def decode_items(stream: Iterable[str]) -> list[CanonicalItem]:
    """Read items from NDJSON lines, skipping blank and malformed ones.

    Args:
        stream: Text stream or any iterable of lines.

    Returns:
        Decoded items in stream order.
    """
    items: list[CanonicalItem] = []
    malformed = 0
    for line in stream:
        line = line.strip()
        if not line:
            continue
        try:
            items.append(CanonicalItem.model_validate(json.loads(line)))
        except (json.JSONDecodeError, ValidationError):
            malformed += 1

    if malformed:
        logger.warning("ndjson_malformed_lines_skipped", count=malformed)
    return items


def decode_digest(text: str) -> Digest:
    """Decode one digest line.

    Raises:
        pydantic.ValidationError: If the text is not a valid digest.
    """
    return Digest.model_validate_json(text.strip())
