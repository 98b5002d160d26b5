"""Built-in source profile used when no configuration file exists."""

from newsbrew.config.schemas import AppConfig, SourceDriver, SourceSpec


DEFAULT_HNSEARCH_QUERIES: tuple[str, ...] = (
    "Claude Code",
    "vibe coding",
    "AI coding assistant",
    "Anthropic Claude",
)
DEFAULT_GITHUB_TOPICS: tuple[str, ...] = (
    "ai",
    "llm",
    "machine-learning",
    "gpt",
    "claude",
)
DEFAULT_SUBREDDITS: tuple[str, ...] = ("MachineLearning", "LocalLLaMA", "ClaudeAI")
DEFAULT_ARXIV_CATEGORIES: tuple[str, ...] = ("cs.CL", "cs.AI", "cs.LG", "cs.MA")


def default_sources() -> list[SourceSpec]:
    """Return the default source list."""
    return [
        SourceSpec(
            key="hackernews",
            driver=SourceDriver.HACKERNEWS,
            name="Hacker News",
            settings={"max": 8},
        ),
        SourceSpec(
            key="hn-search",
            driver=SourceDriver.HNSEARCH,
            name="Claude Code & Vibe Coding",
            queries=list(DEFAULT_HNSEARCH_QUERIES),
            settings={"max": 5},
        ),
        SourceSpec(
            key="github-trending",
            driver=SourceDriver.GITHUB_TRENDING,
            name="GitHub Trending",
            topics=list(DEFAULT_GITHUB_TOPICS),
            settings={"max": 8},
        ),
        SourceSpec(
            key="tldr-ai",
            driver=SourceDriver.TLDR,
            name="TLDR AI",
            settings={"edition": "ai", "max": 8},
        ),
        SourceSpec(
            key="tldr-tech",
            driver=SourceDriver.TLDR,
            name="TLDR Tech",
            settings={"edition": "tech", "max": 5},
        ),
        SourceSpec(
            key="lobsters",
            driver=SourceDriver.LOBSTERS,
            name="Lobste.rs",
            settings={"max": 10},
        ),
        SourceSpec(
            key="reddit-ai",
            driver=SourceDriver.REDDIT,
            name="Reddit AI",
            subreddits=list(DEFAULT_SUBREDDITS),
            settings={"max": 8},
        ),
        SourceSpec(
            key="arxiv-llm",
            driver=SourceDriver.ARXIV,
            name="LLM Research",
            categories=list(DEFAULT_ARXIV_CATEGORIES),
            settings={"max": 5},
        ),
    ]


def default_config() -> AppConfig:
    """Return the configuration used when no file is present."""
    return AppConfig(sources=default_sources())
