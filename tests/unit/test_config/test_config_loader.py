"""Unit tests for ConfigLoader."""

import hashlib
from pathlib import Path

import pytest

from newsbrew.config import ConfigLoader, ConfigValidationError, SourceDriver


VALID_CONFIG = """\
version: 1
db_path: /tmp/newsbrew-test.db
sources:
  - key: hn
    driver: hackernews
    settings:
      max: 5
  - key: blog
    driver: rss
    name: Example Blog
    feed_url: https://blog.example.com/feed.xml
    weight: 2.0
curation:
  window_hours: 12
  max_items: 10
  diversity:
    max_per_domain: 2
sync:
  timeout_seconds: 30
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "newsbrew.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def loader() -> ConfigLoader:
    """Loader for a test run."""
    return ConfigLoader(run_id="test-run")


class TestConfigLoaderDefaults:
    """Tests for the built-in profile fallback."""

    def test_missing_file_uses_defaults(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test a missing optional file yields the default profile."""
        config = loader.load(tmp_path / "absent.yaml")

        assert loader.used_defaults is True
        assert loader.checksum is None
        assert len(config.sources) == 8
        assert {s.driver for s in config.sources} == set(SourceDriver) - {SourceDriver.RSS}

    def test_missing_required_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test a missing required file is an error."""
        path = tmp_path / "absent.yaml"

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(path, required=True)

        assert exc_info.value.file_path == str(path)
        assert exc_info.value.errors[0]["type"] == "file_not_found"

    def test_empty_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test an empty file is an empty configuration."""
        config = loader.load(_write(tmp_path, ""))

        assert config.sources == []
        assert loader.used_defaults is False
        assert loader.checksum == hashlib.sha256(b"").hexdigest()


class TestConfigLoaderValid:
    """Tests for loading valid files."""

    def test_loads_sections(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test every section is read."""
        config = loader.load(_write(tmp_path, VALID_CONFIG))

        assert [s.key for s in config.sources] == ["hn", "blog"]
        assert config.sources[0].settings == {"max": 5}
        assert config.sources[1].weight == 2.0
        assert config.db_path == Path("/tmp/newsbrew-test.db")
        assert config.curation.window_hours == 12
        assert config.curation.max_items == 10
        assert config.curation.diversity.max_per_domain == 2
        assert config.curation.diversity.max_source_percent == 0.4
        assert config.sync.timeout_seconds == 30.0
        assert config.sync.max_workers == 4

    def test_checksum(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test the checksum is the SHA-256 of the file bytes."""
        loader.load(_write(tmp_path, VALID_CONFIG))

        expected = hashlib.sha256(VALID_CONFIG.encode("utf-8")).hexdigest()
        assert loader.checksum == expected
        assert loader.validation_duration_ms > 0

    def test_enabled_sources(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test disabled sources are excluded from enabled_sources."""
        content = """\
sources:
  - key: hn
    driver: hackernews
    enabled: false
  - key: lob
    driver: lobsters
"""
        config = loader.load(_write(tmp_path, content))

        assert [s.key for s in config.enabled_sources] == ["lob"]


class TestConfigLoaderErrors:
    """Tests for invalid files."""

    def test_yaml_syntax_error(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test broken YAML is reported as a parse error."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, "sources: [unclosed"))

        assert exc_info.value.errors[0]["type"] == "yaml_parse_error"

    def test_unknown_driver(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test an unknown driver is located precisely."""
        content = "sources:\n  - key: x\n    driver: telegraph\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, content))

        (error,) = exc_info.value.errors
        assert error["loc"] == "sources.0.driver"
        assert error["type"] == "enum"

    def test_duplicate_keys(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test duplicate source keys are rejected."""
        content = """\
sources:
  - key: hn
    driver: hackernews
  - key: hn
    driver: lobsters
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, content))

        assert "Duplicate source key: hn" in exc_info.value.errors[0]["msg"]

    def test_unknown_top_level_field(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test typos in section names are rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, "sourcez: []\n"))

        assert exc_info.value.errors[0]["type"] == "extra_forbidden"
        assert exc_info.value.errors[0]["loc"] == "sourcez"

    def test_not_a_mapping(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test a top-level list is rejected as a whole."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, "- a\n- b\n"))

        assert exc_info.value.errors[0]["loc"] == "config"

    def test_out_of_range(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test numeric bounds are enforced."""
        content = "curation:\n  max_items: 0\nsync:\n  timeout_seconds: 900\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, content))

        locs = {e["loc"] for e in exc_info.value.errors}
        assert locs == {"curation.max_items", "sync.timeout_seconds"}
        assert loader.validation_errors == exc_info.value.errors

    def test_format_errors_with_hints(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Test formatted errors carry field hints."""
        content = "sources:\n  - key: x\n    driver: telegraph\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(_write(tmp_path, content))

        (formatted,) = exc_info.value.format_errors()
        assert formatted.startswith("sources.0.driver: ")
        assert "Hint: Must be one of: hackernews" in formatted
        (plain,) = exc_info.value.format_errors(include_hint=False)
        assert "Hint" not in plain
