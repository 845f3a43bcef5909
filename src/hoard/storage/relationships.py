"""Relationship links between (namespace, id) addresses."""

import sqlite3

from hoard.core.types import DeleteResult, OpResult, RelationshipRecord
from hoard.storage.base import BaseStore

DEFAULT_RELATION = "OWNS"


def _row_to_record(row: sqlite3.Row) -> RelationshipRecord:
    return RelationshipRecord(
        parent_namespace=row["parent_namespace"],
        parent_id=row["parent_id"],
        child_namespace=row["child_namespace"],
        child_id=row["child_id"],
        relation_type=row["relation_type"],
        metadata=row["metadata"],
        created_at=row["created_at"],
    )


class RelationshipStore(BaseStore):
    """Directed parent -> child links, unique per relation type."""

    def link(
        self,
        parent_namespace: str,
        parent_id: str,
        child_namespace: str,
        child_id: str,
        relation: str = DEFAULT_RELATION,
        metadata: str | None = None,
    ) -> OpResult:
        """Create a link, or replace the metadata of an existing one."""
        return self._write(
            f"link {parent_namespace}/{parent_id} -> {child_namespace}/{child_id}",
            """
            INSERT INTO data_relationships
                (parent_namespace, parent_id, child_namespace, child_id, relation_type, metadata)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(parent_namespace, parent_id, child_namespace, child_id, relation_type)
            DO UPDATE SET metadata = excluded.metadata
            """,
            (parent_namespace, parent_id, child_namespace, child_id, relation, metadata),
        )

    def unlink(
        self,
        parent_namespace: str,
        parent_id: str,
        child_namespace: str,
        child_id: str,
        relation: str = DEFAULT_RELATION,
    ) -> DeleteResult:
        """Remove a link."""
        return self._delete(
            f"unlink {parent_namespace}/{parent_id} -> {child_namespace}/{child_id}",
            """
            DELETE FROM data_relationships
            WHERE parent_namespace = ? AND parent_id = ?
              AND child_namespace = ? AND child_id = ? AND relation_type = ?
            """,
            (parent_namespace, parent_id, child_namespace, child_id, relation),
        )

    def get_children(
        self,
        parent_namespace: str,
        parent_id: str,
        relation: str | None = None,
    ) -> list[RelationshipRecord]:
        """List links going out of a parent, optionally of one relation type."""
        sql = "SELECT * FROM data_relationships WHERE parent_namespace = ? AND parent_id = ?"
        params: list[str] = [parent_namespace, parent_id]
        if relation:
            sql += " AND relation_type = ?"
            params.append(relation)

        rows = self._fetch_all(
            f"list children of {parent_namespace}/{parent_id}",
            sql + " ORDER BY child_namespace, child_id",
            params,
        )
        return [_row_to_record(row) for row in rows or []]

    def get_parents(
        self,
        child_namespace: str,
        child_id: str,
        relation: str | None = None,
    ) -> list[RelationshipRecord]:
        """List links coming into a child, optionally of one relation type."""
        sql = "SELECT * FROM data_relationships WHERE child_namespace = ? AND child_id = ?"
        params: list[str] = [child_namespace, child_id]
        if relation:
            sql += " AND relation_type = ?"
            params.append(relation)

        rows = self._fetch_all(
            f"list parents of {child_namespace}/{child_id}",
            sql + " ORDER BY parent_namespace, parent_id",
            params,
        )
        return [_row_to_record(row) for row in rows or []]
