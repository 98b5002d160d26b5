"""Source adapters turning upstream APIs and feeds into raw items."""

from newsbrew.adapters.arxiv import ArxivAdapter
from newsbrew.adapters.base import (
    AdapterConfig,
    AdapterResult,
    BaseAdapter,
    FetchContext,
    Priority,
    RawItem,
    SourceAdapter,
)
from newsbrew.adapters.errors import (
    AdapterError,
    AdapterErrorClass,
    ErrorRecord,
    ParseError,
    SchemaError,
)
from newsbrew.adapters.feed import FeedAdapter, TldrAdapter
from newsbrew.adapters.github import GitHubTrendingAdapter
from newsbrew.adapters.hackernews import HackerNewsAdapter
from newsbrew.adapters.hnsearch import HnSearchAdapter
from newsbrew.adapters.lobsters import LobstersAdapter
from newsbrew.adapters.reddit import RedditAdapter
from newsbrew.adapters.registry import SourceBinding, build_bindings


__all__ = [
    "AdapterConfig",
    "AdapterError",
    "AdapterErrorClass",
    "AdapterResult",
    "ArxivAdapter",
    "BaseAdapter",
    "ErrorRecord",
    "FeedAdapter",
    "FetchContext",
    "GitHubTrendingAdapter",
    "HackerNewsAdapter",
    "HnSearchAdapter",
    "LobstersAdapter",
    "ParseError",
    "Priority",
    "RawItem",
    "RedditAdapter",
    "SchemaError",
    "SourceAdapter",
    "SourceBinding",
    "build_bindings",
]
