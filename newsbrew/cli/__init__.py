"""Command-line interface."""

from newsbrew.cli.main import cli


__all__ = ["cli"]
