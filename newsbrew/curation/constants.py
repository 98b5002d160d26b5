"""Constants for the curation pipeline."""

from typing import Final


DIGEST_TYPE: Final[str] = "trss-digest"
DIGEST_VERSION: Final[str] = "1"

# Applied when a digest is requested with a non-positive item limit
DEFAULT_MAX_ITEMS: Final[int] = 25

DEFAULT_WINDOW_HOURS: Final[int] = 24
DEFAULT_DIGEST_TITLE: Final[str] = "Daily Brew"

NEUTRAL_FACTOR: Final[float] = 1.0
