"""
StorageEngine - the single entry point host applications hold.

The engine owns one ConnectionManager and the four table stores built on
it, and exposes:
- setup() / shutdown() / get_connection() for the host lifecycle
- typed get/put/batch/delete wrappers over the keyed table
- object, tag and relationship operations
- raw parameterized SQL passthrough

No engine state is global: construct one per database and pass it to
whoever needs storage.

Usage:
    from hoard import StorageEngine, Settings

    engine = StorageEngine(Settings(data_dir=Path("data")))
    engine.setup()
    engine.put("stats", "player-42", "kills", 7)
    engine.get("stats", "player-42", "kills", int)  # -> 7
    engine.shutdown()
"""

import sqlite3
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from hoard.core.config import Settings, get_logger, settings as default_settings
from hoard.core.errors import StorageError
from hoard.core.types import (
    DataFormat,
    DeleteResult,
    KeyedRecord,
    ObjectRecord,
    OpResult,
    RelationshipRecord,
)
from hoard.storage.backup import create_backup
from hoard.storage.connection import ConnectionManager
from hoard.storage.keyed import KeyedStore
from hoard.storage.objects import ObjectStore
from hoard.storage.relationships import DEFAULT_RELATION, RelationshipStore
from hoard.storage.schema import SCHEMA_SQL
from hoard.storage.tags import TagIndex

logger = get_logger("engine")


class StorageEngine:
    """
    Typed key/value, object and tag storage over one SQLite file.

    Every public operation reports failure through its return value
    (an unsuccessful OpResult, None, or an empty collection) and never
    raises a storage error into caller code.
    """

    def __init__(
        self,
        config: Settings | None = None,
        connections: ConnectionManager | None = None,
    ):
        """Initialize the engine. Call setup() before first use."""
        self.config = config or default_settings
        self.connections = connections or ConnectionManager.from_settings(self.config)

        self.keyed = KeyedStore(self.connections)
        self.objects = ObjectStore(self.connections)
        self.tags = TagIndex(self.connections)
        self.relationships = RelationshipStore(self.connections)

    def __enter__(self) -> "StorageEngine":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ============================================
    # Host Lifecycle
    # ============================================

    def setup(self) -> bool:
        """Create all tables and indexes if missing. Safe to call on every startup."""
        try:
            conn = self.connections.acquire()
            conn.executescript(SCHEMA_SQL)
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Failed to set up database: {e}")
            return False

        logger.info(f"Database initialized at {self.connections.db_path}")
        return True

    def shutdown(self, backup: bool | None = None) -> None:
        """
        Close the connection, backing the database up first if configured.

        Safe to call when already closed; an engine that is no longer
        connected is not reopened just to be backed up.
        """
        if backup is None:
            backup = self.config.backup_on_shutdown

        try:
            if backup and self.connections.is_connected() and self.connections.db_path.exists():
                self.backup()
        finally:
            self.connections.close()

    def get_connection(self) -> sqlite3.Connection | None:
        """Get the live connection, reconnecting if needed. None if it can't be opened."""
        try:
            return self.connections.acquire()
        except StorageError:
            return None

    def is_connected(self) -> bool:
        return self.connections.is_connected()

    def backup(self) -> Path | None:
        """Write a timestamped backup of the database."""
        conn = self.get_connection()
        if conn is None:
            return None
        return create_backup(conn, self.config)

    # ============================================
    # Keyed Values
    # ============================================

    def put(
        self,
        namespace: str,
        identity: str,
        key: str,
        value: Any,
        metadata: str | None = None,
    ) -> OpResult:
        return self.keyed.put(namespace, identity, key, value, metadata)

    def put_batch(
        self,
        namespace: str,
        identity: str,
        values: Mapping[str, Any],
        metadata: str | None = None,
    ) -> OpResult:
        return self.keyed.put_batch(namespace, identity, values, metadata)

    def get(
        self,
        namespace: str,
        identity: str,
        key: str,
        target: Any = None,
        default: Any = None,
    ) -> Any:
        return self.keyed.get(namespace, identity, key, target, default)

    def get_record(self, namespace: str, identity: str, key: str) -> KeyedRecord | None:
        return self.keyed.get_record(namespace, identity, key)

    def get_all(self, namespace: str, identity: str, target: Any = None) -> dict[str, Any]:
        return self.keyed.get_all(namespace, identity, target)

    def has_data(self, namespace: str, identity: str) -> bool:
        return self.keyed.has_data(namespace, identity)

    def delete(self, namespace: str, identity: str) -> DeleteResult:
        return self.keyed.delete(namespace, identity)

    def delete_key(self, namespace: str, identity: str, key: str) -> DeleteResult:
        return self.keyed.delete_key(namespace, identity, key)

    def put_global(self, namespace: str, key: str, value: Any) -> OpResult:
        return self.keyed.put_global(namespace, key, value)

    def get_global(self, namespace: str, key: str, target: Any = None, default: Any = None) -> Any:
        return self.keyed.get_global(namespace, key, target, default)

    def list_namespaces(self) -> list[str]:
        return self.keyed.list_namespaces()

    def list_identities(self, namespace: str) -> list[str]:
        return self.keyed.list_identities(namespace)

    # ============================================
    # Objects
    # ============================================

    def put_object(
        self,
        namespace: str,
        object_id: str,
        obj: Any,
        data_format: DataFormat | str = DataFormat.JSON,
    ) -> OpResult:
        return self.objects.put_object(namespace, object_id, obj, data_format)

    def get_object(self, namespace: str, object_id: str, target: Any = None) -> Any:
        return self.objects.get_object(namespace, object_id, target)

    def get_object_as_map(self, namespace: str, object_id: str) -> dict[str, Any]:
        return self.objects.get_object_as_map(namespace, object_id)

    def get_object_record(self, namespace: str, object_id: str) -> ObjectRecord | None:
        return self.objects.get_object_record(namespace, object_id)

    def list_object_ids(self, namespace: str) -> list[str]:
        return self.objects.list_object_ids(namespace)

    def delete_object(self, namespace: str, object_id: str) -> DeleteResult:
        return self.objects.delete_object(namespace, object_id)

    # ============================================
    # Tags
    # ============================================

    def add_tag(
        self,
        target_namespace: str,
        target_id: str,
        name: str,
        value: str | None = None,
    ) -> OpResult:
        return self.tags.add_tag(target_namespace, target_id, name, value)

    def get_tags(self, target_namespace: str, target_id: str) -> dict[str, str | None]:
        return self.tags.get_tags(target_namespace, target_id)

    def find_by_tag(self, target_namespace: str, name: str, value: str | None = None) -> list[str]:
        return self.tags.find_by_tag(target_namespace, name, value)

    def remove_tag(self, target_namespace: str, target_id: str, name: str) -> DeleteResult:
        return self.tags.remove_tag(target_namespace, target_id, name)

    def clear_tags(self, target_namespace: str, target_id: str) -> DeleteResult:
        return self.tags.clear_tags(target_namespace, target_id)

    # ============================================
    # Relationships
    # ============================================

    def link(
        self,
        parent_namespace: str,
        parent_id: str,
        child_namespace: str,
        child_id: str,
        relation: str = DEFAULT_RELATION,
        metadata: str | None = None,
    ) -> OpResult:
        return self.relationships.link(
            parent_namespace, parent_id, child_namespace, child_id, relation, metadata
        )

    def unlink(
        self,
        parent_namespace: str,
        parent_id: str,
        child_namespace: str,
        child_id: str,
        relation: str = DEFAULT_RELATION,
    ) -> DeleteResult:
        return self.relationships.unlink(
            parent_namespace, parent_id, child_namespace, child_id, relation
        )

    def get_children(
        self, parent_namespace: str, parent_id: str, relation: str | None = None
    ) -> list[RelationshipRecord]:
        return self.relationships.get_children(parent_namespace, parent_id, relation)

    def get_parents(
        self, child_namespace: str, child_id: str, relation: str | None = None
    ) -> list[RelationshipRecord]:
        return self.relationships.get_parents(child_namespace, child_id, relation)

    # ============================================
    # Raw SQL Passthrough
    # ============================================

    def raw_query(self, sql: str, *params: Any) -> OpResult:
        """
        Run a parameterized query on the shared connection.

        Rows come back as dicts in ``result.rows``. Values must be passed
        as ``params``; never format them into ``sql``.
        """
        try:
            cursor = self.connections.acquire().execute(sql, params)
            rows = [dict(row) for row in cursor.fetchall()]
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Raw query failed: {e}")
            return OpResult.failed(e)
        return OpResult.ok(rows=rows)

    def raw_execute(self, sql: str, *params: Any) -> OpResult:
        """Run a parameterized write; ``result.affected`` holds the row count."""
        try:
            cursor = self.connections.acquire().execute(sql, params)
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Raw execute failed: {e}")
            return OpResult.failed(e)
        return OpResult.ok(affected=max(cursor.rowcount, 0))

    def raw_execute_many(self, sql: str, param_sets: Sequence[Sequence[Any]]) -> OpResult:
        """Run one parameterized write per parameter set, all in one transaction."""
        try:
            with self.connections.transaction() as conn:
                affected = conn.executemany(sql, param_sets).rowcount
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Raw batch execute failed, rolled back: {e}")
            return OpResult.failed(e)
        return OpResult.ok(affected=max(affected, 0))
