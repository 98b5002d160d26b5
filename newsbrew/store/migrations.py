"""Versioned SQLite schema for the state store.

Each migration is a pair of scripts. The applied versions are recorded in
``schema_version``; a database is at the highest version listed there.
"""

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from newsbrew.store.errors import MigrationError


logger = structlog.get_logger()

CURRENT_VERSION = 2


@dataclass(frozen=True)
class Migration:
    """One schema step: ``upgrade`` brings the database to ``version``."""

    version: int
    description: str
    upgrade: str
    downgrade: str


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        description="Sources, items, item state and rules",
        upgrade="""
CREATE TABLE IF NOT EXISTS sources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    kind TEXT NOT NULL,
    url TEXT NOT NULL DEFAULT '',
    icon TEXT NOT NULL DEFAULT '',
    weight REAL NOT NULL DEFAULT 1.0,
    enabled INTEGER NOT NULL DEFAULT 1,
    last_sync TEXT,
    error_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    UNIQUE (name, kind)
);

-- One row per (fingerprint, source); the short id may repeat across sources
CREATE TABLE IF NOT EXISTS items (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL,
    fingerprint TEXT NOT NULL,
    source_id INTEGER NOT NULL REFERENCES sources(id),
    title TEXT NOT NULL,
    url TEXT NOT NULL DEFAULT '',
    canonical_url TEXT NOT NULL DEFAULT '',
    summary TEXT NOT NULL DEFAULT '',
    body TEXT NOT NULL DEFAULT '',
    published_at TEXT NOT NULL,
    fetched_at TEXT NOT NULL,
    tags_json TEXT NOT NULL DEFAULT '[]',
    raw_score REAL NOT NULL DEFAULT 0,
    computed_score REAL NOT NULL DEFAULT 0,
    engagement_json TEXT,
    content_hash TEXT NOT NULL,
    UNIQUE (fingerprint, source_id)
);
CREATE INDEX IF NOT EXISTS idx_items_id ON items(id);
CREATE INDEX IF NOT EXISTS idx_items_fetched_at ON items(fetched_at);
CREATE INDEX IF NOT EXISTS idx_items_score ON items(computed_score);

CREATE TABLE IF NOT EXISTS item_state (
    item_id TEXT PRIMARY KEY,
    state TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    kind TEXT NOT NULL,
    pattern TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL
);
""",
        downgrade="""
DROP TABLE IF EXISTS rules;
DROP TABLE IF EXISTS item_state;
DROP INDEX IF EXISTS idx_items_score;
DROP INDEX IF EXISTS idx_items_fetched_at;
DROP INDEX IF EXISTS idx_items_id;
DROP TABLE IF EXISTS items;
DROP TABLE IF EXISTS sources;
""",
    ),
    Migration(
        version=2,
        description="Dedup audit edges and digest history",
        upgrade="""
CREATE TABLE IF NOT EXISTS dedup_edges (
    item_id_a TEXT NOT NULL,
    item_id_b TEXT NOT NULL,
    confidence REAL NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (item_id_a, item_id_b)
);

CREATE TABLE IF NOT EXISTS digests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    generated_at TEXT NOT NULL,
    title TEXT NOT NULL,
    item_count INTEGER NOT NULL,
    payload_json TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_digests_generated_at ON digests(generated_at);
""",
        downgrade="""
DROP INDEX IF EXISTS idx_digests_generated_at;
DROP TABLE IF EXISTS digests;
DROP TABLE IF EXISTS dedup_edges;
""",
    ),
)


def get_migrations_to_apply(current_version: int) -> list[Migration]:
    """Migrations newer than ``current_version``, oldest first."""
    return [m for m in MIGRATIONS if m.version > current_version]


_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT
)
"""


class MigrationManager:
    """Moves a connection's schema up or down between versions."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._log = logger.bind(component="store", operation="migration")

    def get_current_version(self) -> int:
        """Highest applied version, 0 for an empty database."""
        self._conn.execute(_VERSION_TABLE)
        (version,) = self._conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM schema_version"
        ).fetchone()
        return version

    def apply_migrations(self) -> list[int]:
        """Bring the schema to ``CURRENT_VERSION``.

        Returns:
            Versions applied, oldest first; empty when already current.

        Raises:
            MigrationError: If a script fails. Earlier steps stay applied.
        """
        pending = get_migrations_to_apply(self.get_current_version())
        for migration in pending:
            self._log.info(
                "applying_migration",
                version=migration.version,
                description=migration.description,
            )
            self._run(
                migration,
                migration.upgrade,
                "INSERT INTO schema_version (version, applied_at, description) "
                "VALUES (?, ?, ?)",
                (
                    migration.version,
                    datetime.now(UTC).isoformat(),
                    migration.description,
                ),
            )
        if not pending:
            self._log.debug("schema_current", version=CURRENT_VERSION)
        return [m.version for m in pending]

    def rollback_to(self, target_version: int) -> list[int]:
        """Undo every applied migration above ``target_version``.

        Returns:
            Versions undone, newest first.

        Raises:
            ValueError: If ``target_version`` is negative.
            MigrationError: If a downgrade script fails.
        """
        if target_version < 0:
            msg = f"Invalid target version: {target_version}"
            raise ValueError(msg)

        current = self.get_current_version()
        undo = [
            m
            for m in reversed(MIGRATIONS)
            if target_version < m.version <= current
        ]
        for migration in undo:
            self._log.info("rolling_back_migration", version=migration.version)
            self._run(
                migration,
                migration.downgrade,
                "DELETE FROM schema_version WHERE version = ?",
                (migration.version,),
            )
        return [m.version for m in undo]

    def _run(
        self,
        migration: Migration,
        script: str,
        bookkeeping: str,
        params: tuple[object, ...],
    ) -> None:
        # executescript commits any open transaction before it starts
        try:
            self._conn.executescript(script)
            self._conn.execute(bookkeeping, params)
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            self._log.error("migration_failed", version=migration.version, error=str(e))
            raise MigrationError(migration.version, str(e)) from e
