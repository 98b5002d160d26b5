"""Terminal-safe text."""

import re


# C0 controls except tab and newline, DEL and C1 controls
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize_text(text: str) -> str:
    """Strip control characters that could inject terminal escape sequences."""
    if not text:
        return text
    return _CONTROL_CHARS.sub("", text)
