"""
Storage Layer - SQLite tables behind the engine.

The tables:
1. data_storage → Typed keyed values (KeyedStore)
2. object_storage → Whole serialized objects (ObjectStore)
3. data_tags → Tags with reverse lookup (TagIndex)
4. data_relationships → Parent/child links (RelationshipStore)

All stores share one ConnectionManager. All SQL lives in this package.
"""

from hoard.storage.backup import cleanup_old_backups, create_backup, list_backups
from hoard.storage.connection import ConnectionManager
from hoard.storage.keyed import GLOBAL_IDENTITY, KeyedStore
from hoard.storage.objects import ObjectStore
from hoard.storage.relationships import RelationshipStore
from hoard.storage.schema import SCHEMA_SQL, TABLES
from hoard.storage.tags import TagIndex

__all__ = [
    "ConnectionManager",
    "KeyedStore",
    "ObjectStore",
    "TagIndex",
    "RelationshipStore",
    "GLOBAL_IDENTITY",
    "SCHEMA_SQL",
    "TABLES",
    "create_backup",
    "cleanup_old_backups",
    "list_backups",
]
