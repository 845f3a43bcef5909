"""
Core type definitions for Hoard.

These types describe the four persisted record kinds:
- KeyedRecord: (namespace, identity, key) -> typed value
- ObjectRecord: (namespace, object id) -> serialized blob
- RelationshipRecord: parent/child links between addresses
- TagRecord: (namespace, target id, tag name) -> tag value

Callers only ever receive copies of these, never live rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


# ============================================
# Enums
# ============================================

class ValueType(str, Enum):
    """Type tag stored beside every keyed value."""
    NULL = "NULL"
    STRING = "STRING"
    INTEGER = "INTEGER"
    LONG = "LONG"
    DOUBLE = "DOUBLE"
    BOOLEAN = "BOOLEAN"
    LIST = "LIST"
    MAP = "MAP"
    OBJECT = "OBJECT"

    @property
    def is_structured(self) -> bool:
        """Whether the payload is structured text (JSON)."""
        return self in (ValueType.LIST, ValueType.MAP, ValueType.OBJECT)


class DataFormat(str, Enum):
    """Encoding of an object store payload."""
    JSON = "JSON"
    RAW = "RAW"


# ============================================
# Records
# ============================================

class StoredRecord(BaseModel):
    """Base class for rows read back from the store."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime | None = None
    """When the row was first written."""

    updated_at: datetime | None = None
    """When the row was last replaced."""


class KeyedRecord(StoredRecord):
    """A single typed value addressed by (namespace, identity, key)."""

    namespace: str
    identity: str
    key: str
    value: str | None = None
    """Encoded payload, None for NULL values."""

    value_type: ValueType = ValueType.STRING
    metadata: str | None = None


class ObjectRecord(StoredRecord):
    """A whole serialized object addressed by (namespace, object id)."""

    namespace: str
    object_id: str
    payload: str
    format: DataFormat = DataFormat.JSON
    version: int = 1
    """Incremented on every overwrite. Informational only."""


class RelationshipRecord(StoredRecord):
    """A typed link from one address to another."""

    parent_namespace: str
    parent_id: str
    child_namespace: str
    child_id: str
    relation_type: str = "OWNS"
    metadata: str | None = None


class TagRecord(StoredRecord):
    """A named (optionally valued) tag on a target."""

    target_namespace: str
    target_id: str
    tag_name: str
    tag_value: str | None = None


# ============================================
# Operation Results
# ============================================

@dataclass
class OpResult:
    """
    Outcome of a storage operation.

    Public operations never raise storage failures; they return one of
    these instead. Truthiness follows ``success`` so callers can keep
    writing ``if engine.put(...):``.
    """

    success: bool
    """Whether the operation completed."""

    affected: int = 0
    """Rows changed by the statement(s)."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    """Result rows for query passthroughs."""

    error: str | None = None
    """Error message if the operation failed."""

    def __bool__(self) -> bool:
        return self.success

    @property
    def changed(self) -> bool:
        """Whether at least one row was affected."""
        return self.success and self.affected > 0

    @classmethod
    def ok(cls, affected: int = 0, rows: list[dict[str, Any]] | None = None) -> "OpResult":
        return cls(success=True, affected=affected, rows=rows or [])

    @classmethod
    def failed(cls, error: BaseException | str) -> "OpResult":
        return cls(success=False, error=str(error))


class DeleteResult(OpResult):
    """
    Outcome of a delete.

    Truthy only when at least one row was removed, so ``if engine.delete(...)``
    reads as "something was deleted". Deleting nothing still has
    ``success=True``; a real failure has ``success=False`` and ``error`` set.
    """

    def __bool__(self) -> bool:
        return self.changed
