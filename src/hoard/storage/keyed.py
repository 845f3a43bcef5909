"""
Keyed Storage Table - (namespace, identity, key) -> typed value.

Every write is an upsert on the (namespace, identity, key) unique
constraint: the first write creates the row, later writes replace its
value, type tag, metadata and updated_at. Rows are never duplicated.
"""

import sqlite3
from collections.abc import Mapping
from typing import Any

from hoard.core.codec import decode, encode, try_decode
from hoard.core.config import get_logger
from hoard.core.errors import BatchError, StorageError
from hoard.core.types import DeleteResult, KeyedRecord, OpResult
from hoard.storage.base import BaseStore

logger = get_logger("storage.keyed")

GLOBAL_IDENTITY = "__global__"
"""Identity used for namespace-wide values that belong to no entity."""

UPSERT_SQL = """
    INSERT INTO data_storage (namespace, identity, data_key, data_value, value_type, metadata)
    VALUES (?, ?, ?, ?, ?, ?)
    ON CONFLICT(namespace, identity, data_key) DO UPDATE SET
        data_value = excluded.data_value,
        value_type = excluded.value_type,
        metadata = excluded.metadata,
        updated_at = datetime('now')
"""


def _row_to_record(row: sqlite3.Row) -> KeyedRecord:
    return KeyedRecord(
        namespace=row["namespace"],
        identity=row["identity"],
        key=row["data_key"],
        value=row["data_value"],
        value_type=row["value_type"],
        metadata=row["metadata"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class KeyedStore(BaseStore):
    """Typed values addressed by (namespace, identity, key)."""

    # ============================================
    # Writes
    # ============================================

    def put(
        self,
        namespace: str,
        identity: str,
        key: str,
        value: Any,
        metadata: str | None = None,
    ) -> OpResult:
        """Encode and upsert one value."""
        try:
            payload, value_type = encode(value)
        except Exception as e:
            logger.error(f"Failed to encode {namespace}/{identity}/{key}: {e}")
            return OpResult.failed(e)

        return self._write(
            f"store {namespace}/{identity}/{key}",
            UPSERT_SQL,
            (namespace, identity, key, payload, value_type.value, metadata),
        )

    def put_batch(
        self,
        namespace: str,
        identity: str,
        values: Mapping[str, Any],
        metadata: str | None = None,
    ) -> OpResult:
        """
        Upsert many keys for one identity in a single transaction.

        Either every key is written or none are. An empty mapping is a
        successful no-op.
        """
        if not values:
            return OpResult.ok()

        try:
            rows = []
            for key, value in values.items():
                payload, value_type = encode(value)
                rows.append((namespace, identity, key, payload, value_type.value, metadata))
        except Exception as e:
            logger.error(f"Failed to encode batch for {namespace}/{identity}: {e}")
            return OpResult.failed(e)

        try:
            with self.connections.transaction() as conn:
                affected = 0
                for row in rows:
                    affected += conn.execute(UPSERT_SQL, row).rowcount
        except (sqlite3.Error, StorageError) as e:
            error = BatchError(f"Batch for {namespace}/{identity} rolled back: {e}")
            logger.error(str(error))
            return OpResult.failed(error)

        logger.debug(f"Stored {len(rows)} keys for {namespace}/{identity}")
        return OpResult.ok(affected=affected)

    def put_global(self, namespace: str, key: str, value: Any) -> OpResult:
        """Store a namespace-wide value not tied to any identity."""
        return self.put(namespace, GLOBAL_IDENTITY, key, value)

    def delete(self, namespace: str, identity: str) -> DeleteResult:
        """Delete every key stored for an identity."""
        result = self._delete(
            f"delete {namespace}/{identity}",
            "DELETE FROM data_storage WHERE namespace = ? AND identity = ?",
            (namespace, identity),
        )
        if result.changed:
            logger.debug(f"Deleted {result.affected} keys for {namespace}/{identity}")
        return result

    def delete_key(self, namespace: str, identity: str, key: str) -> DeleteResult:
        """Delete one key. Deleting a missing key succeeds with nothing affected."""
        return self._delete(
            f"delete {namespace}/{identity}/{key}",
            "DELETE FROM data_storage WHERE namespace = ? AND identity = ? AND data_key = ?",
            (namespace, identity, key),
        )

    # ============================================
    # Reads
    # ============================================

    def get_record(self, namespace: str, identity: str, key: str) -> KeyedRecord | None:
        """Get the raw stored row for a key."""
        row = self._fetch_one(
            f"retrieve {namespace}/{identity}/{key}",
            "SELECT * FROM data_storage WHERE namespace = ? AND identity = ? AND data_key = ?",
            (namespace, identity, key),
        )
        return _row_to_record(row) if row else None

    def get(
        self,
        namespace: str,
        identity: str,
        key: str,
        target: Any = None,
        default: Any = None,
    ) -> Any:
        """
        Get a value decoded into ``target``.

        Args:
            namespace: Namespace of the value
            identity: Entity the value belongs to
            key: Key of the value
            target: Python type to rebuild; None for the stored type's natural form
            default: Returned when the key is missing or can't be decoded

        Returns:
            The decoded value, or ``default``
        """
        row = self._fetch_one(
            f"retrieve {namespace}/{identity}/{key}",
            "SELECT data_value, value_type FROM data_storage "
            "WHERE namespace = ? AND identity = ? AND data_key = ?",
            (namespace, identity, key),
        )
        if row is None:
            return default

        decoded = try_decode(row["data_value"], row["value_type"], target)
        if not decoded.ok or decoded.value is None:
            return default
        return decoded.value

    def get_global(self, namespace: str, key: str, target: Any = None, default: Any = None) -> Any:
        """Get a namespace-wide value."""
        return self.get(namespace, GLOBAL_IDENTITY, key, target, default)

    def get_all(self, namespace: str, identity: str, target: Any = None) -> dict[str, Any]:
        """
        Get every value stored for an identity.

        Each value is decoded on its own; one that can't be rebuilt comes
        back as None without affecting the others. Returns an empty dict
        when nothing is stored or the read fails.
        """
        rows = self._fetch_all(
            f"retrieve all data for {namespace}/{identity}",
            "SELECT data_key, data_value, value_type FROM data_storage "
            "WHERE namespace = ? AND identity = ? ORDER BY data_key",
            (namespace, identity),
        )
        if not rows:
            return {}

        return {
            row["data_key"]: decode(row["data_value"], row["value_type"], target)
            for row in rows
        }

    def get_records(self, namespace: str, identity: str) -> list[KeyedRecord]:
        """Get the raw stored rows for an identity."""
        rows = self._fetch_all(
            f"retrieve records for {namespace}/{identity}",
            "SELECT * FROM data_storage WHERE namespace = ? AND identity = ? ORDER BY data_key",
            (namespace, identity),
        )
        return [_row_to_record(row) for row in rows or []]

    def has_data(self, namespace: str, identity: str) -> bool:
        """Check whether anything is stored for an identity."""
        row = self._fetch_one(
            f"check data for {namespace}/{identity}",
            "SELECT COUNT(*) AS count FROM data_storage WHERE namespace = ? AND identity = ?",
            (namespace, identity),
        )
        return bool(row and row["count"] > 0)

    def list_namespaces(self) -> list[str]:
        """List every namespace holding keyed data."""
        rows = self._fetch_all(
            "list namespaces",
            "SELECT DISTINCT namespace FROM data_storage ORDER BY namespace",
        )
        return [row["namespace"] for row in rows or []]

    def list_identities(self, namespace: str) -> list[str]:
        """List every identity with data in a namespace."""
        rows = self._fetch_all(
            f"list identities for {namespace}",
            "SELECT DISTINCT identity FROM data_storage WHERE namespace = ? ORDER BY identity",
            (namespace,),
        )
        return [row["identity"] for row in rows or []]
