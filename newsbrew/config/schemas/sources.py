"""Source configuration schema."""

from enum import Enum
from typing import Annotated, Any

from pydantic import Field, model_validator

from newsbrew.data_model import StrictBaseModel


class SourceDriver(str, Enum):
    """Adapter implementation backing a configured source."""

    HACKERNEWS = "hackernews"
    HNSEARCH = "hnsearch"
    GITHUB_TRENDING = "github-trending"
    LOBSTERS = "lobsters"
    REDDIT = "reddit"
    ARXIV = "arxiv"
    RSS = "rss"
    TLDR = "tldr"


class SourceSpec(StrictBaseModel):
    """One configured source.

    Driver specific options (``queries``, ``topics``, ``tags``,
    ``subreddits``, ``categories``, ``feed_url``) are only read by the
    driver they apply to; ``settings`` is an open map such as
    ``{max: 10}``.
    """

    key: Annotated[
        str,
        Field(
            min_length=1,
            max_length=64,
            pattern=r"^[a-z0-9][a-z0-9_-]*$",
            description="Unique source key",
        ),
    ]
    driver: SourceDriver = Field(description="Adapter driver")
    name: str | None = Field(default=None, min_length=1, description="Display name")
    icon: str | None = Field(default=None, description="Display icon")
    enabled: bool = Field(default=True, description="Whether to sync this source")
    weight: Annotated[float, Field(ge=0.0, le=10.0)] | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    queries: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    subreddits: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    feed_url: str | None = Field(default=None, description="Feed location for rss")

    @model_validator(mode="after")
    def validate_driver_options(self) -> "SourceSpec":
        """Require the options a driver cannot work without."""
        if self.driver == SourceDriver.RSS:
            if not self.feed_url:
                msg = "rss sources require feed_url"
                raise ValueError(msg)
        if self.feed_url and not self.feed_url.startswith(("http://", "https://")):
            msg = "feed_url must start with http:// or https://"
            raise ValueError(msg)
        max_items = self.settings.get("max")
        if max_items is not None and (
            isinstance(max_items, bool) or not isinstance(max_items, int) or max_items < 1
        ):
            msg = "settings.max must be a positive integer"
            raise ValueError(msg)
        return self
