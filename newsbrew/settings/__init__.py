"""Settings module for application configuration."""

from newsbrew.settings.app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
