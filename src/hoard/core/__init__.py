"""
Core module - Configuration, types, errors and the value codec.
"""

from hoard.core.codec import Decoded, decode, encode, try_decode
from hoard.core.config import Settings, get_logger, settings, setup_logging
from hoard.core.errors import (
    BatchError,
    ConnectivityError,
    DecodeError,
    StorageError,
    TransactionError,
    WriteError,
)
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

__all__ = [
    "Settings",
    "settings",
    "setup_logging",
    "get_logger",
    "encode",
    "decode",
    "try_decode",
    "Decoded",
    "StorageError",
    "ConnectivityError",
    "WriteError",
    "DecodeError",
    "BatchError",
    "TransactionError",
    "DataFormat",
    "DeleteResult",
    "KeyedRecord",
    "ObjectRecord",
    "OpResult",
    "RelationshipRecord",
    "TagRecord",
    "ValueType",
]
