"""Newsbrew: multi-source ingestion and digest curation."""

__version__ = "0.1.0"
