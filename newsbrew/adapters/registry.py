"""Builds adapter bindings from configured sources."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from newsbrew.adapters.arxiv import ArxivAdapter
from newsbrew.adapters.base import AdapterConfig, SourceAdapter
from newsbrew.adapters.feed import FeedAdapter, TldrAdapter
from newsbrew.adapters.github import GitHubTrendingAdapter
from newsbrew.adapters.hackernews import HackerNewsAdapter
from newsbrew.adapters.hnsearch import HnSearchAdapter
from newsbrew.adapters.lobsters import LobstersAdapter
from newsbrew.adapters.reddit import RedditAdapter
from newsbrew.config.schemas import SourceDriver, SourceSpec
from newsbrew.fetch import HttpFetcher


logger = structlog.get_logger()


@dataclass(frozen=True)
class SourceBinding:
    """An adapter paired with its runtime configuration.

    Attributes:
        key: Configured source key.
        adapter: Adapter instance.
        config: Runtime configuration passed to ``fetch``.
        weight: Configured scoring weight. When set it overwrites the stored
            weight on every sync; None leaves the stored weight alone.
    """

    key: str
    adapter: SourceAdapter
    config: AdapterConfig
    weight: float | None = None


AdapterFactory = Callable[[SourceSpec, HttpFetcher, str | None], SourceAdapter]


def _build_hackernews(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return HackerNewsAdapter(http_client, name=spec.name, icon=spec.icon)


def _build_hnsearch(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return HnSearchAdapter(
        http_client, queries=spec.queries or None, name=spec.name, icon=spec.icon
    )


def _build_github(
    spec: SourceSpec, http_client: HttpFetcher, token: str | None
) -> SourceAdapter:
    return GitHubTrendingAdapter(
        http_client,
        topics=spec.topics or None,
        token=token,
        name=spec.name,
        icon=spec.icon,
    )


def _build_lobsters(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return LobstersAdapter(
        http_client, tags=spec.tags or None, name=spec.name, icon=spec.icon
    )


def _build_reddit(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return RedditAdapter(
        http_client, subreddits=spec.subreddits or None, name=spec.name, icon=spec.icon
    )


def _build_arxiv(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return ArxivAdapter(
        http_client, categories=spec.categories or None, name=spec.name, icon=spec.icon
    )


def _build_rss(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    # feed_url presence is enforced by SourceSpec validation
    return FeedAdapter(
        http_client, feed_url=spec.feed_url or "", name=spec.name, icon=spec.icon
    )


def _build_tldr(
    spec: SourceSpec, http_client: HttpFetcher, _token: str | None
) -> SourceAdapter:
    return TldrAdapter(
        http_client,
        edition=str(spec.settings.get("edition", "ai")),
        feed_url=spec.feed_url,
        name=spec.name,
        icon=spec.icon,
    )


ADAPTER_FACTORIES: dict[SourceDriver, AdapterFactory] = {
    SourceDriver.HACKERNEWS: _build_hackernews,
    SourceDriver.HNSEARCH: _build_hnsearch,
    SourceDriver.GITHUB_TRENDING: _build_github,
    SourceDriver.LOBSTERS: _build_lobsters,
    SourceDriver.REDDIT: _build_reddit,
    SourceDriver.ARXIV: _build_arxiv,
    SourceDriver.RSS: _build_rss,
    SourceDriver.TLDR: _build_tldr,
}


def build_bindings(
    specs: Sequence[SourceSpec],
    http_client: HttpFetcher,
    github_token: str | None = None,
) -> list[SourceBinding]:
    """Instantiate an adapter for every enabled source.

    Args:
        specs: Configured sources.
        http_client: Shared HTTP client handed to each adapter.
        github_token: Optional token for the GitHub adapter.

    Returns:
        Bindings in configuration order.

    Raises:
        ValueError: If a source cannot be constructed (e.g. unknown edition).
    """
    bindings: list[SourceBinding] = []
    for spec in specs:
        if not spec.enabled:
            logger.debug("source_disabled", source_key=spec.key)
            continue
        factory = ADAPTER_FACTORIES[spec.driver]
        adapter = factory(spec, http_client, github_token)
        bindings.append(
            SourceBinding(
                key=spec.key,
                adapter=adapter,
                config=AdapterConfig(enabled=True, settings=dict(spec.settings)),
                weight=spec.weight,
            )
        )
    return bindings
