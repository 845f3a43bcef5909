"""Schema definition for Hoard storage."""

# -----------------------------------------------------------------------------
# Tables
# -----------------------------------------------------------------------------

TABLES = ("data_storage", "object_storage", "data_relationships", "data_tags")

SCHEMA_SQL = """
-- Keyed values: (namespace, identity, key) -> typed value
CREATE TABLE IF NOT EXISTS data_storage (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    namespace TEXT NOT NULL,
    identity TEXT NOT NULL,
    data_key TEXT NOT NULL,
    data_value TEXT,
    value_type TEXT NOT NULL DEFAULT 'STRING',
    metadata TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(namespace, identity, data_key)
);

-- Whole objects: (namespace, object id) -> serialized payload
CREATE TABLE IF NOT EXISTS object_storage (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    namespace TEXT NOT NULL,
    object_id TEXT NOT NULL,
    object_data TEXT NOT NULL,
    data_format TEXT NOT NULL DEFAULT 'JSON',
    version INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(namespace, object_id)
);

-- Links between addresses
CREATE TABLE IF NOT EXISTS data_relationships (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    parent_namespace TEXT NOT NULL,
    parent_id TEXT NOT NULL,
    child_namespace TEXT NOT NULL,
    child_id TEXT NOT NULL,
    relation_type TEXT NOT NULL DEFAULT 'OWNS',
    metadata TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(parent_namespace, parent_id, child_namespace, child_id, relation_type)
);

-- Tags for categorization and reverse lookup
CREATE TABLE IF NOT EXISTS data_tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    target_namespace TEXT NOT NULL,
    target_id TEXT NOT NULL,
    tag_name TEXT NOT NULL,
    tag_value TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(target_namespace, target_id, tag_name)
);

CREATE INDEX IF NOT EXISTS idx_data_namespace_identity ON data_storage(namespace, identity);
CREATE INDEX IF NOT EXISTS idx_data_key ON data_storage(data_key);
CREATE INDEX IF NOT EXISTS idx_object_namespace ON object_storage(namespace);
CREATE INDEX IF NOT EXISTS idx_object_id ON object_storage(object_id);
CREATE INDEX IF NOT EXISTS idx_parent_relation ON data_relationships(parent_namespace, parent_id);
CREATE INDEX IF NOT EXISTS idx_child_relation ON data_relationships(child_namespace, child_id);
CREATE INDEX IF NOT EXISTS idx_tags_target ON data_tags(target_namespace, target_id);
CREATE INDEX IF NOT EXISTS idx_tag_name ON data_tags(tag_name);
"""
