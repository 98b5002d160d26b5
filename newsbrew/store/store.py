"""SQLite state store implementation."""

import json
import sqlite3
import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from newsbrew.canonical import compute_content_hash
from newsbrew.data_model import CanonicalItem, Engagement, ItemState, SourceRef
from newsbrew.store.errors import (
    ConnectionError as StoreConnectionError,
    InvalidRuleError,
    ItemNotFoundError,
    SourceNotFoundError,
)
from newsbrew.store.metrics import StoreMetrics, TransactionContext
from newsbrew.store.migrations import CURRENT_VERSION, MigrationManager
from newsbrew.store.models import (
    DedupEdge,
    ItemEventType,
    ItemFilter,
    ItemOrder,
    Rule,
    RuleKind,
    SourceRecord,
    UpsertResult,
)


logger = structlog.get_logger()

_ITEM_COLUMNS = """
    i.id, i.fingerprint, i.title, i.url, i.canonical_url, i.summary, i.body,
    i.published_at, i.fetched_at, i.tags_json, i.raw_score, i.computed_score,
    i.engagement_json, s.name AS source_name, s.icon AS source_icon,
    COALESCE(st.state, 'unread') AS state
"""

_ITEM_FROM = """
FROM items i
JOIN sources s ON s.id = i.source_id
LEFT JOIN item_state st ON st.item_id = i.id
"""

_ORDER_BY = {
    ItemOrder.RANKED: "i.computed_score DESC, i.published_at DESC, i.row_id ASC",
    ItemOrder.CHRONOLOGICAL: "i.fetched_at ASC, i.published_at ASC, i.row_id ASC",
}


def _to_iso(value: datetime) -> str:
    """Render a timestamp as fixed-width UTC ISO-8601 for ordered comparison."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


class StateStore:
    """SQLite state store for sources, items, rules and digests.

    Provides transactional APIs for managing persistent state across sync
    and digest runs. Uses WAL mode for reliability and supports schema
    migrations.
    """

    def __init__(
        self,
        db_path: Path | str,
        run_id: str | None = None,
    ) -> None:
        """Initialize the state store.

        Args:
            db_path: Path to SQLite database file.
            run_id: Optional run ID for logging context.
        """
        self._db_path = Path(db_path) if isinstance(db_path, str) else db_path
        self._run_id = run_id or str(uuid.uuid4())
        self._conn: sqlite3.Connection | None = None
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(
            component="store",
            run_id=self._run_id,
            db_path=str(self._db_path),
        )

    @property
    def db_path(self) -> Path:
        """Get the database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open connection to database and apply migrations.

        Creates the database file and parent directories if they don't exist.
        """
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        migration_mgr = MigrationManager(self._conn)
        old_version = migration_mgr.get_current_version()
        applied = migration_mgr.apply_migrations()

        self._log.info(
            "database_connected",
            old_version=old_version,
            new_version=CURRENT_VERSION,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.debug(
                "database_closed",
                commits=self._metrics.commits,
                rollbacks=self._metrics.rollbacks,
                upserts={k.value: v for k, v in self._metrics.upserts.items()},
            )

    def __enter__(self) -> "StateStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure database is connected.

        Returns:
            The database connection.

        Raises:
            StoreConnectionError: If not connected.
        """
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Generator[TransactionContext]:
        """Context manager for transactions with timing and logging.

        Args:
            operation: Name of the operation for logging.

        Yields:
            Transaction context with timing information.
        """
        conn = self._ensure_connected()
        tx_id = str(uuid.uuid4())[:8]
        start_ns = time.perf_counter_ns()
        ctx = TransactionContext(tx_id=tx_id, operation=operation, started_ns=start_ns)

        try:
            yield ctx
            conn.commit()
            duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
            self._metrics.record_commit(operation, duration_ms)

            self._log.debug(
                "transaction_complete",
                tx_id=tx_id,
                op=operation,
                affected_rows=ctx.affected_rows,
                duration_ms=round(duration_ms, 2),
            )

        except Exception:
            conn.rollback()
            self._metrics.record_rollback(operation)
            duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000

            self._log.error(
                "transaction_failed",
                tx_id=tx_id,
                op=operation,
                duration_ms=round(duration_ms, 2),
            )
            raise

    # ===== Sources =====

    def get_or_create_source(
        self,
        name: str,
        kind: str,
        url: str = "",
        icon: str = "",
        weight: float = 1.0,
    ) -> SourceRecord:
        """Return the source registered under (name, kind), creating it if needed.

        Args:
            name: Source display name.
            kind: Adapter driver kind.
            url: Upstream URL recorded on creation.
            icon: Display icon recorded on creation.
            weight: Initial scoring weight recorded on creation.

        Returns:
            The existing or newly created source record.
        """
        existing = self.get_source(name, kind)
        if existing is not None:
            return existing

        conn = self._ensure_connected()
        with self._transaction("create_source") as tx:
            cursor = conn.execute(
                """
                INSERT INTO sources (name, kind, url, icon, weight, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name, kind, url, icon, weight, _to_iso(datetime.now(UTC))),
            )
            tx.add_affected_rows(cursor.rowcount)
            source_id = cursor.lastrowid

        self._log.info("source_registered", source=name, kind=kind)
        return SourceRecord(
            id=source_id, name=name, kind=kind, url=url, icon=icon, weight=weight
        )

    def get_source(self, name: str, kind: str) -> SourceRecord | None:
        """Get the source registered under exactly (name, kind)."""
        row = self._ensure_connected().execute(
            "SELECT * FROM sources WHERE name = ? AND kind = ?", (name, kind)
        ).fetchone()
        return self._row_to_source(row) if row else None

    def update_source_weight(self, source_id: int, weight: float) -> None:
        """Overwrite the weight of one source row."""
        if weight < 0:
            msg = f"Source weight must be non-negative, got {weight}"
            raise ValueError(msg)
        with self._transaction("update_source_weight") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE sources SET weight = ? WHERE id = ?", (weight, source_id)
            )
            tx.add_affected_rows(cursor.rowcount)

    def list_sources(self) -> list[SourceRecord]:
        """List all registered sources ordered by name."""
        conn = self._ensure_connected()
        rows = conn.execute("SELECT * FROM sources ORDER BY name, kind").fetchall()
        return [self._row_to_source(row) for row in rows]

    def get_source_by_name(self, name: str) -> SourceRecord | None:
        """Get the first source registered under a name.

        Args:
            name: Source display name (case-insensitive).

        Returns:
            Source record or None if not registered.
        """
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT * FROM sources WHERE lower(name) = lower(?) ORDER BY id LIMIT 1",
            (name,),
        ).fetchone()
        return self._row_to_source(row) if row else None

    def set_source_weight(self, name: str, weight: float) -> SourceRecord:
        """Set the scoring weight for every source registered under a name.

        Args:
            name: Source display name (case-insensitive).
            weight: New non-negative weight.

        Returns:
            Updated source record.

        Raises:
            SourceNotFoundError: If no source has this name.
            ValueError: If weight is negative.
        """
        if weight < 0:
            msg = f"Source weight must be non-negative, got {weight}"
            raise ValueError(msg)

        with self._transaction("set_source_weight") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE sources SET weight = ? WHERE lower(name) = lower(?)",
                (weight, name),
            )
            tx.add_affected_rows(cursor.rowcount)

        if tx.affected_rows == 0:
            raise SourceNotFoundError(name)

        source = self.get_source_by_name(name)
        if source is None:
            raise SourceNotFoundError(name)
        return source

    def set_source_enabled(self, name: str, enabled: bool) -> bool:
        """Enable or disable every source registered under a name.

        Returns:
            True if any source was updated.
        """
        with self._transaction("set_source_enabled") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE sources SET enabled = ? WHERE lower(name) = lower(?)",
                (int(enabled), name),
            )
            tx.add_affected_rows(cursor.rowcount)
        return tx.affected_rows > 0

    def mark_sync_success(self, source_id: int, at: datetime | None = None) -> None:
        """Stamp the last sync time and reset the consecutive error counter.

        Args:
            source_id: Source row id.
            at: Sync timestamp (default: now).
        """
        stamp = _to_iso(at or datetime.now(UTC))
        with self._transaction("mark_sync_success") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE sources SET last_sync = ?, error_count = 0 WHERE id = ?",
                (stamp, source_id),
            )
            tx.add_affected_rows(cursor.rowcount)

    def increment_sync_errors(self, source_id: int) -> None:
        """Increment the consecutive error counter of a source.

        Args:
            source_id: Source row id.
        """
        with self._transaction("increment_sync_errors") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE sources SET error_count = error_count + 1 WHERE id = ?",
                (source_id,),
            )
            tx.add_affected_rows(cursor.rowcount)

    def _row_to_source(self, row: sqlite3.Row) -> SourceRecord:
        return SourceRecord(
            id=row["id"],
            name=row["name"],
            kind=row["kind"],
            url=row["url"],
            icon=row["icon"],
            weight=row["weight"],
            enabled=bool(row["enabled"]),
            last_sync=_from_iso(row["last_sync"]),
            error_count=row["error_count"],
        )

    # ===== Items =====

    def upsert_item(self, item: CanonicalItem, source_id: int) -> UpsertResult:
        """Insert or update an item keyed on (fingerprint, source).

        Re-ingesting the same logical item never creates a second row. The
        stored id, fetch time, computed score and user state are preserved
        on update; only the content fields are refreshed, and only when the
        content hash changed.

        Args:
            item: Canonical item to store.
            source_id: Row id of the source that produced it.

        Returns:
            UpsertResult with event type (NEW, UPDATED, or UNCHANGED).
        """
        conn = self._ensure_connected()
        tags_json = json.dumps(item.tags, ensure_ascii=False)
        engagement_json = (
            item.engagement.model_dump_json(exclude_none=True)
            if item.engagement is not None
            else None
        )
        content_hash = compute_content_hash(
            item.title,
            item.url,
            item.published_at,
            extra={
                "canonical_url": item.canonical_url,
                "summary": item.summary,
                "body": item.body,
                "tags": tags_json,
                "raw_score": str(item.raw_score),
                "engagement": engagement_json or "",
            },
        )

        with self._transaction("upsert_item") as tx:
            existing = conn.execute(
                """
                SELECT row_id, content_hash FROM items
                WHERE fingerprint = ? AND source_id = ?
                """,
                (item.fingerprint, source_id),
            ).fetchone()

            if existing is None:
                cursor = conn.execute(
                    """
                    INSERT INTO items (
                        id, fingerprint, source_id, title, url, canonical_url,
                        summary, body, published_at, fetched_at, tags_json,
                        raw_score, computed_score, engagement_json, content_hash
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.fingerprint,
                        source_id,
                        item.title,
                        item.url,
                        item.canonical_url,
                        item.summary,
                        item.body,
                        _to_iso(item.published_at),
                        _to_iso(item.fetched_at),
                        tags_json,
                        item.raw_score,
                        item.computed_score,
                        engagement_json,
                        content_hash,
                    ),
                )
                tx.add_affected_rows(cursor.rowcount)
                event_type = ItemEventType.NEW

            elif existing["content_hash"] == content_hash:
                event_type = ItemEventType.UNCHANGED

            else:
                cursor = conn.execute(
                    """
                    UPDATE items SET
                        title = ?, url = ?, canonical_url = ?, summary = ?,
                        body = ?, published_at = ?, tags_json = ?, raw_score = ?,
                        engagement_json = ?, content_hash = ?
                    WHERE row_id = ?
                    """,
                    (
                        item.title,
                        item.url,
                        item.canonical_url,
                        item.summary,
                        item.body,
                        _to_iso(item.published_at),
                        tags_json,
                        item.raw_score,
                        engagement_json,
                        content_hash,
                        existing["row_id"],
                    ),
                )
                tx.add_affected_rows(cursor.rowcount)
                event_type = ItemEventType.UPDATED

        self._metrics.record_upsert(event_type)
        return UpsertResult(
            event_type=event_type, affected_rows=tx.affected_rows, item=item
        )

    def list_items(self, item_filter: ItemFilter | None = None) -> list[CanonicalItem]:
        """List stored items.

        Args:
            item_filter: Window, source, state and ordering filter.

        Returns:
            Matching items with their current user state.
        """
        conn = self._ensure_connected()
        flt = item_filter or ItemFilter()

        clauses: list[str] = []
        params: list[Any] = []
        if flt.since is not None:
            clauses.append("i.fetched_at >= ?")
            params.append(_to_iso(flt.since))
        if flt.source_name:
            clauses.append("lower(s.name) = lower(?)")
            params.append(flt.source_name)
        if flt.unread_only:
            clauses.append("COALESCE(st.state, 'unread') = 'unread'")

        sql = f"SELECT {_ITEM_COLUMNS} {_ITEM_FROM}"  # noqa: S608
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += f" ORDER BY {_ORDER_BY[flt.order]}"
        if flt.limit is not None:
            sql += " LIMIT ?"
            params.append(flt.limit)

        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_item(row) for row in rows]

    def get_item(self, id_prefix: str) -> CanonicalItem:
        """Get the most recently fetched item whose id starts with a prefix.

        Args:
            id_prefix: Full id or leading characters of it.

        Returns:
            The matching item.

        Raises:
            ItemNotFoundError: If no item matches.
        """
        conn = self._ensure_connected()
        prefix = id_prefix.strip()
        if not prefix:
            raise ItemNotFoundError(id_prefix)

        row = conn.execute(
            f"""
            SELECT {_ITEM_COLUMNS} {_ITEM_FROM}
            WHERE substr(i.id, 1, ?) = ?
            ORDER BY i.fetched_at DESC, i.row_id DESC
            LIMIT 1
            """,  # noqa: S608
            (len(prefix), prefix),
        ).fetchone()
        if row is None:
            raise ItemNotFoundError(id_prefix)
        return self._row_to_item(row)

    def update_score(self, item_id: str, score: float) -> int:
        """Persist a recomputed score for every row carrying an item id.

        Args:
            item_id: Item id.
            score: New computed score.

        Returns:
            Number of rows updated.
        """
        with self._transaction("update_score") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE items SET computed_score = ? WHERE id = ?",
                (score, item_id),
            )
            tx.add_affected_rows(cursor.rowcount)
        return tx.affected_rows

    def count_items(self) -> int:
        """Count stored item rows."""
        conn = self._ensure_connected()
        return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]

    def _row_to_item(self, row: sqlite3.Row) -> CanonicalItem:
        engagement = (
            Engagement.model_validate_json(row["engagement_json"])
            if row["engagement_json"]
            else None
        )
        return CanonicalItem(
            id=row["id"],
            fingerprint=row["fingerprint"],
            title=row["title"],
            url=row["url"],
            canonical_url=row["canonical_url"],
            summary=row["summary"],
            body=row["body"],
            source=SourceRef(name=row["source_name"], icon=row["source_icon"]),
            published_at=datetime.fromisoformat(row["published_at"]),
            fetched_at=datetime.fromisoformat(row["fetched_at"]),
            tags=json.loads(row["tags_json"]),
            raw_score=row["raw_score"],
            computed_score=row["computed_score"],
            engagement=engagement,
            state=ItemState(row["state"]),
        )

    # ===== Item State =====

    def _set_state(self, item_id: str, state: ItemState) -> None:
        with self._transaction(f"mark_{state.value}") as tx:
            cursor = self._ensure_connected().execute(
                """
                INSERT INTO item_state (item_id, state, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(item_id) DO UPDATE SET
                    state = excluded.state,
                    updated_at = excluded.updated_at
                """,
                (item_id, state.value, _to_iso(datetime.now(UTC))),
            )
            tx.add_affected_rows(cursor.rowcount)

    def mark_read(self, item_id: str) -> None:
        """Mark an item as read."""
        self._set_state(item_id, ItemState.READ)

    def mark_saved(self, item_id: str) -> None:
        """Mark an item as saved."""
        self._set_state(item_id, ItemState.SAVED)

    def mark_unread(self, item_id: str) -> None:
        """Reset an item to unread."""
        self._set_state(item_id, ItemState.UNREAD)

    def get_state(self, item_id: str) -> ItemState:
        """Get the user state of an item, defaulting to unread."""
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT state FROM item_state WHERE item_id = ?", (item_id,)
        ).fetchone()
        return ItemState(row["state"]) if row else ItemState.UNREAD

    def count_by_state(self) -> dict[str, int]:
        """Count distinct item ids per user state.

        Returns:
            Mapping of state value to count, including zero counts.
        """
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT COALESCE(st.state, 'unread') AS state, COUNT(DISTINCT i.id) AS n
            FROM items i
            LEFT JOIN item_state st ON st.item_id = i.id
            GROUP BY COALESCE(st.state, 'unread')
            """
        ).fetchall()
        counts = {state.value: 0 for state in ItemState}
        for row in rows:
            counts[row["state"]] = row["n"]
        return counts

    # ===== Rules =====

    def insert_rule(self, kind: RuleKind | str, pattern: str) -> Rule:
        """Create a mute or boost rule.

        Args:
            kind: Rule kind.
            pattern: Pattern to match (domain, source name or tag).

        Returns:
            The created rule.

        Raises:
            InvalidRuleError: If the kind is unknown or the pattern is blank.
        """
        try:
            rule_kind = RuleKind(kind)
        except ValueError as e:
            raise InvalidRuleError(f"unknown kind {kind!r}") from e

        pattern = pattern.strip()
        if not pattern:
            raise InvalidRuleError("pattern must not be blank")

        created_at = datetime.now(UTC)
        with self._transaction("insert_rule") as tx:
            cursor = self._ensure_connected().execute(
                """
                INSERT INTO rules (kind, pattern, enabled, created_at)
                VALUES (?, ?, 1, ?)
                """,
                (rule_kind.value, pattern, _to_iso(created_at)),
            )
            tx.add_affected_rows(cursor.rowcount)
            rule_id = cursor.lastrowid

        self._log.info("rule_created", rule_id=rule_id, kind=rule_kind.value)
        return Rule(id=rule_id, kind=rule_kind, pattern=pattern, created_at=created_at)

    def list_rules(self, enabled_only: bool = False) -> list[Rule]:
        """List rules in creation order.

        Rows with an unknown kind are skipped so they stay inert.

        Args:
            enabled_only: Only return enabled rules.

        Returns:
            List of rules.
        """
        conn = self._ensure_connected()
        sql = "SELECT * FROM rules"
        if enabled_only:
            sql += " WHERE enabled = 1"
        sql += " ORDER BY id"

        rules: list[Rule] = []
        for row in conn.execute(sql).fetchall():
            try:
                kind = RuleKind(row["kind"])
            except ValueError:
                self._log.warning("rule_kind_unknown", rule_id=row["id"])
                continue
            rules.append(
                Rule(
                    id=row["id"],
                    kind=kind,
                    pattern=row["pattern"],
                    enabled=bool(row["enabled"]),
                    created_at=_from_iso(row["created_at"]),
                )
            )
        return rules

    def delete_rule(self, rule_id: int) -> bool:
        """Delete a rule.

        Returns:
            True if a rule was deleted.
        """
        with self._transaction("delete_rule") as tx:
            cursor = self._ensure_connected().execute(
                "DELETE FROM rules WHERE id = ?", (rule_id,)
            )
            tx.add_affected_rows(cursor.rowcount)
        return tx.affected_rows > 0

    def set_rule_enabled(self, rule_id: int, enabled: bool) -> bool:
        """Enable or disable a rule.

        Returns:
            True if a rule was updated.
        """
        with self._transaction("set_rule_enabled") as tx:
            cursor = self._ensure_connected().execute(
                "UPDATE rules SET enabled = ? WHERE id = ?",
                (int(enabled), rule_id),
            )
            tx.add_affected_rows(cursor.rowcount)
        return tx.affected_rows > 0

    # ===== Dedup Edges =====

    def insert_dedup_edge(self, id_a: str, id_b: str, confidence: float) -> bool:
        """Record that two items were collapsed as duplicates.

        The pair is stored in canonical order so the undirected edge is
        recorded once.

        Args:
            id_a: One item id.
            id_b: The other item id.
            confidence: Match confidence in [0, 1].

        Returns:
            True if a new edge was recorded.
        """
        edge = DedupEdge(
            item_id_a=min(id_a, id_b),
            item_id_b=max(id_a, id_b),
            confidence=confidence,
        )
        with self._transaction("insert_dedup_edge") as tx:
            cursor = self._ensure_connected().execute(
                """
                INSERT OR IGNORE INTO dedup_edges
                    (item_id_a, item_id_b, confidence, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    edge.item_id_a,
                    edge.item_id_b,
                    edge.confidence,
                    _to_iso(datetime.now(UTC)),
                ),
            )
            tx.add_affected_rows(cursor.rowcount)
        return tx.affected_rows > 0

    def list_dedup_edges(self) -> list[DedupEdge]:
        """List all recorded dedup edges."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT item_id_a, item_id_b, confidence FROM dedup_edges "
            "ORDER BY item_id_a, item_id_b"
        ).fetchall()
        return [
            DedupEdge(
                item_id_a=row["item_id_a"],
                item_id_b=row["item_id_b"],
                confidence=row["confidence"],
            )
            for row in rows
        ]

    def get_deduped_ids(self, item_id: str) -> list[str]:
        """Get the ids recorded as duplicates of an item."""
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT item_id_b AS other FROM dedup_edges WHERE item_id_a = ?
            UNION
            SELECT item_id_a AS other FROM dedup_edges WHERE item_id_b = ?
            """,
            (item_id, item_id),
        ).fetchall()
        return sorted(row["other"] for row in rows if row["other"] != item_id)

    # ===== Digests =====

    def save_digest(
        self,
        payload_json: str,
        title: str,
        item_count: int,
        generated_at: datetime,
    ) -> int:
        """Persist a serialized digest for history.

        Args:
            payload_json: Digest serialized as JSON.
            title: Digest title.
            item_count: Number of items in the digest.
            generated_at: Generation timestamp.

        Returns:
            Row id of the stored digest.
        """
        with self._transaction("save_digest") as tx:
            cursor = self._ensure_connected().execute(
                """
                INSERT INTO digests (generated_at, title, item_count, payload_json)
                VALUES (?, ?, ?, ?)
                """,
                (_to_iso(generated_at), title, item_count, payload_json),
            )
            tx.add_affected_rows(cursor.rowcount)
            digest_id = cursor.lastrowid
        return digest_id

    def get_latest_digest_json(self) -> str | None:
        """Get the most recently saved digest payload."""
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT payload_json FROM digests ORDER BY generated_at DESC, id DESC LIMIT 1"
        ).fetchone()
        return row["payload_json"] if row else None

    # ===== Utility Methods =====

    def get_schema_version(self) -> int:
        """Get the current schema version."""
        return MigrationManager(self._ensure_connected()).get_current_version()

    def get_stats(self) -> dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with table counts, item state counts and file size.
        """
        conn = self._ensure_connected()

        def _count(table: str) -> int:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]  # noqa: S608

        db_size = self._db_path.stat().st_size if self._db_path.exists() else 0

        return {
            "schema_version": self.get_schema_version(),
            "sources": _count("sources"),
            "items": _count("items"),
            "rules": _count("rules"),
            "dedup_edges": _count("dedup_edges"),
            "digests": _count("digests"),
            "items_by_state": self.count_by_state(),
            "db_size_bytes": db_size,
        }
