"""Shared fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from newsbrew.curation import CurationMetrics
from newsbrew.fetch import FetchMetrics
from newsbrew.store import StateStore, StoreMetrics
from newsbrew.sync import SyncMetrics


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None]:
    """Isolate metrics singletons and logging configuration between tests."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    StoreMetrics.reset()
    FetchMetrics.reset()
    SyncMetrics.reset()
    CurationMetrics.reset()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a fresh database file."""
    return tmp_path / "newsbrew.db"


@pytest.fixture
def store(db_path: Path) -> Generator[StateStore]:
    """Connected state store on a fresh database."""
    with StateStore(db_path, run_id="test-run") as connected:
        yield connected
