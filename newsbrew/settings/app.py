"""Environment-level settings: file locations and API tokens."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CONFIG_PATH = Path("~/.config/newsbrew/newsbrew.yaml")
DEFAULT_DB_PATH = Path("~/.local/share/newsbrew/newsbrew.db")


class AppSettings(BaseSettings):
    """Values read from the environment and an optional ``.env`` file.

    Secrets such as ``GITHUB_TOKEN`` live here and never in the YAML config.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path | None = Field(default=None, validation_alias="NEWSBREW_CONFIG")
    db_path: Path | None = Field(default=None, validation_alias="NEWSBREW_DB_PATH")
    github_token: str | None = Field(default=None, validation_alias="GITHUB_TOKEN")

    def resolve_config_path(self, override: Path | None = None) -> Path:
        """Pick the config file: explicit override, then env, then default."""
        return (override or self.config_path or DEFAULT_CONFIG_PATH).expanduser()

    def resolve_db_path(
        self,
        override: Path | None = None,
        configured: Path | None = None,
    ) -> Path:
        """Pick the database file: override, env, config file, then default."""
        return (
            override or self.db_path or configured or DEFAULT_DB_PATH
        ).expanduser()


def get_settings() -> AppSettings:
    """Read settings from the current environment."""
    return AppSettings()
