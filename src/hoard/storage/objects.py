"""
Object Store - (namespace, object id) -> whole serialized object.

Writes always replace the complete payload. JSON payloads are rebuilt
into the caller's requested type on read; RAW payloads are handed back
as text for the caller to interpret.
"""

import sqlite3
from typing import Any

from hoard.core.codec import from_structured_text, to_structured_text
from hoard.core.config import get_logger
from hoard.core.types import DataFormat, DeleteResult, ObjectRecord, OpResult
from hoard.storage.base import BaseStore

logger = get_logger("storage.objects")

UPSERT_SQL = """
    INSERT INTO object_storage (namespace, object_id, object_data, data_format)
    VALUES (?, ?, ?, ?)
    ON CONFLICT(namespace, object_id) DO UPDATE SET
        object_data = excluded.object_data,
        data_format = excluded.data_format,
        version = object_storage.version + 1,
        updated_at = datetime('now')
"""


def _row_to_record(row: sqlite3.Row) -> ObjectRecord:
    return ObjectRecord(
        namespace=row["namespace"],
        object_id=row["object_id"],
        payload=row["object_data"],
        format=row["data_format"],
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def serialize_object(obj: Any, data_format: DataFormat) -> str:
    """Render an object as its stored payload."""
    if data_format is DataFormat.JSON:
        return to_structured_text(obj)
    if isinstance(obj, bytes):
        return obj.decode("utf-8")
    return str(obj)


class ObjectStore(BaseStore):
    """Whole objects addressed by (namespace, object id)."""

    def put_object(
        self,
        namespace: str,
        object_id: str,
        obj: Any,
        data_format: DataFormat | str = DataFormat.JSON,
    ) -> OpResult:
        """Serialize and store an object, replacing any previous payload."""
        try:
            data_format = DataFormat(data_format)
            payload = serialize_object(obj, data_format)
        except Exception as e:
            logger.error(f"Failed to serialize object {namespace}/{object_id}: {e}")
            return OpResult.failed(e)

        return self._write(
            f"store object {namespace}/{object_id}",
            UPSERT_SQL,
            (namespace, object_id, payload, data_format.value),
        )

    def get_object_record(self, namespace: str, object_id: str) -> ObjectRecord | None:
        """Get the stored row for an object."""
        row = self._fetch_one(
            f"retrieve object {namespace}/{object_id}",
            "SELECT * FROM object_storage WHERE namespace = ? AND object_id = ?",
            (namespace, object_id),
        )
        return _row_to_record(row) if row else None

    def get_object(self, namespace: str, object_id: str, target: Any = None) -> Any:
        """
        Get an object rebuilt into ``target``.

        JSON payloads are validated into ``target`` (plain JSON types when
        None). RAW payloads are returned as stored text. Returns None when
        the object is missing or can't be rebuilt.
        """
        record = self.get_object_record(namespace, object_id)
        if record is None:
            return None

        if record.format is not DataFormat.JSON:
            return record.payload

        try:
            return from_structured_text(record.payload, target)
        except Exception as e:
            target_name = getattr(target, "__name__", repr(target))
            logger.warning(f"Failed to decode object {namespace}/{object_id} as {target_name}: {e}")
            return None

    def get_object_as_map(self, namespace: str, object_id: str) -> dict[str, Any]:
        """Get a JSON object as a plain dict. Empty when missing, non-JSON or not a mapping."""
        record = self.get_object_record(namespace, object_id)
        if record is None or record.format is not DataFormat.JSON:
            return {}

        try:
            return from_structured_text(record.payload, dict[str, Any])
        except Exception as e:
            logger.warning(f"Object {namespace}/{object_id} is not a JSON mapping: {e}")
            return {}

    def list_object_ids(self, namespace: str) -> list[str]:
        """List the ids of every object in a namespace."""
        rows = self._fetch_all(
            f"list objects in {namespace}",
            "SELECT object_id FROM object_storage WHERE namespace = ? ORDER BY object_id",
            (namespace,),
        )
        return [row["object_id"] for row in rows or []]

    def delete_object(self, namespace: str, object_id: str) -> DeleteResult:
        """Delete an object."""
        return self._delete(
            f"delete object {namespace}/{object_id}",
            "DELETE FROM object_storage WHERE namespace = ? AND object_id = ?",
            (namespace, object_id),
        )
