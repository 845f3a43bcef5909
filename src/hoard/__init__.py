"""
Hoard

Embedded typed key/value, object and tag storage on a single SQLite file.
Callers store values under (namespace, identity, key), whole objects under
(namespace, id), and tag anything for reverse lookup.
"""

__version__ = "0.1.0"
__author__ = "Hoard Team"

from hoard.core.config import Settings, settings
from hoard.core.types import (
    DataFormat,
    DeleteResult,
    KeyedRecord,
    ObjectRecord,
    OpResult,
    RelationshipRecord,
    TagRecord,
    ValueType,
)
from hoard.engine import StorageEngine

__all__ = [
    "Settings",
    "settings",
    "StorageEngine",
    "DataFormat",
    "DeleteResult",
    "KeyedRecord",
    "ObjectRecord",
    "OpResult",
    "RelationshipRecord",
    "TagRecord",
    "ValueType",
]
