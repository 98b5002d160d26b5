"""Unit tests for building adapter bindings from configured sources."""

import pytest
from pydantic import ValidationError

from newsbrew.adapters import (
    ArxivAdapter,
    FeedAdapter,
    FetchContext,
    GitHubTrendingAdapter,
    HackerNewsAdapter,
    HnSearchAdapter,
    LobstersAdapter,
    RedditAdapter,
    SourceAdapter,
    TldrAdapter,
    build_bindings,
)
from newsbrew.adapters import github
from newsbrew.adapters.registry import ADAPTER_FACTORIES
from newsbrew.config.schemas import SourceDriver, SourceSpec
from tests.helpers.http import fake_http, ok_json
from tests.helpers.time import FIXED_NOW


class TestBuildBindings:
    """Tests for build_bindings."""

    def test_every_driver_has_a_factory(self) -> None:
        """Test the factory table covers all drivers."""
        assert set(ADAPTER_FACTORIES) == set(SourceDriver)

    def test_builds_each_driver(self) -> None:
        """Test every driver produces its adapter type."""
        specs = [
            SourceSpec(key="hn", driver=SourceDriver.HACKERNEWS),
            SourceSpec(key="hns", driver=SourceDriver.HNSEARCH, queries=["llm"]),
            SourceSpec(key="gh", driver=SourceDriver.GITHUB_TRENDING),
            SourceSpec(key="lob", driver=SourceDriver.LOBSTERS),
            SourceSpec(key="rd", driver=SourceDriver.REDDIT, subreddits=["rust"]),
            SourceSpec(key="ax", driver=SourceDriver.ARXIV),
            SourceSpec(
                key="blog",
                driver=SourceDriver.RSS,
                feed_url="https://blog.example.com/feed.xml",
                name="Blog",
            ),
            SourceSpec(key="tldr", driver=SourceDriver.TLDR),
        ]

        bindings = build_bindings(specs, fake_http({}))

        assert [type(b.adapter) for b in bindings] == [
            HackerNewsAdapter,
            HnSearchAdapter,
            GitHubTrendingAdapter,
            LobstersAdapter,
            RedditAdapter,
            ArxivAdapter,
            FeedAdapter,
            TldrAdapter,
        ]
        assert all(isinstance(b.adapter, SourceAdapter) for b in bindings)
        assert [b.key for b in bindings] == [s.key for s in specs]

    def test_skips_disabled(self) -> None:
        """Test disabled sources produce no binding."""
        specs = [
            SourceSpec(key="hn", driver=SourceDriver.HACKERNEWS, enabled=False),
            SourceSpec(key="lob", driver=SourceDriver.LOBSTERS),
        ]

        bindings = build_bindings(specs, fake_http({}))

        assert [b.key for b in bindings] == ["lob"]

    def test_carries_name_weight_and_settings(self) -> None:
        """Test display overrides, weight and settings reach the binding."""
        spec = SourceSpec(
            key="hn",
            driver=SourceDriver.HACKERNEWS,
            name="HN Front",
            icon="Y",
            weight=2.5,
            settings={"max": 3},
        )

        (binding,) = build_bindings([spec], fake_http({}))

        assert binding.adapter.name == "HN Front"
        assert binding.adapter.icon == "Y"
        assert binding.weight == 2.5
        assert binding.config.enabled is True
        assert dict(binding.config.settings) == {"max": 3}

    def test_default_names(self) -> None:
        """Test adapters keep their default name without an override."""
        (binding,) = build_bindings(
            [SourceSpec(key="hn", driver=SourceDriver.HACKERNEWS)], fake_http({})
        )
        assert binding.adapter.name == "Hacker News"

    def test_tldr_edition_from_settings(self) -> None:
        """Test the TLDR edition is read from settings."""
        spec = SourceSpec(
            key="tldr", driver=SourceDriver.TLDR, settings={"edition": "webdev"}
        )

        (binding,) = build_bindings([spec], fake_http({}))

        assert binding.adapter.name == "TLDR Webdev"

    def test_unknown_tldr_edition(self) -> None:
        """Test an unknown edition fails the build."""
        spec = SourceSpec(
            key="tldr", driver=SourceDriver.TLDR, settings={"edition": "sports"}
        )
        with pytest.raises(ValueError, match="Unknown TLDR edition"):
            build_bindings([spec], fake_http({}))

    def test_github_token_passed_through(self) -> None:
        """Test the GitHub token reaches the request headers."""
        http = fake_http({github.SEARCH_URL: ok_json({"items": []})})
        (binding,) = build_bindings(
            [SourceSpec(key="gh", driver=SourceDriver.GITHUB_TRENDING)],
            http,
            github_token="secret",
        )

        binding.adapter.fetch(FetchContext(now=FIXED_NOW), binding.config)

        headers = http.fetch.call_args.kwargs["extra_headers"]
        assert headers["Authorization"] == "Bearer secret"


class TestSourceSpec:
    """Tests for SourceSpec validation."""

    def test_rss_requires_feed_url(self) -> None:
        """Test rss sources without a feed URL are rejected."""
        with pytest.raises(ValidationError, match="require feed_url"):
            SourceSpec(key="blog", driver=SourceDriver.RSS)

    def test_feed_url_scheme(self) -> None:
        """Test feed URLs must be http(s)."""
        with pytest.raises(ValidationError, match="http"):
            SourceSpec(key="blog", driver=SourceDriver.RSS, feed_url="ftp://x/feed")

    @pytest.mark.parametrize("value", [0, -2, "10", True])
    def test_invalid_max(self, value: object) -> None:
        """Test settings.max must be a positive integer."""
        with pytest.raises(ValidationError, match="settings.max"):
            SourceSpec(key="hn", driver=SourceDriver.HACKERNEWS, settings={"max": value})

    @pytest.mark.parametrize("key", ["", "Upper", "-lead", "has space"])
    def test_invalid_key(self, key: str) -> None:
        """Test source keys are lowercase slugs."""
        with pytest.raises(ValidationError):
            SourceSpec(key=key, driver=SourceDriver.HACKERNEWS)

    def test_unknown_field_rejected(self) -> None:
        """Test unknown options are rejected."""
        with pytest.raises(ValidationError):
            SourceSpec(key="hn", driver=SourceDriver.HACKERNEWS, colour="red")  # type: ignore[call-arg]
