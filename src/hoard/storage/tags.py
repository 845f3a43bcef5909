"""
Tag Index - (target namespace, target id, tag name) -> tag value.

A target holds at most one value per tag name; adding a tag again
replaces its value. Tags without a value mark presence only.
"""

from hoard.core.config import get_logger
from hoard.core.types import DeleteResult, OpResult, TagRecord
from hoard.storage.base import BaseStore

logger = get_logger("storage.tags")


class TagIndex(BaseStore):
    """Tags on arbitrary targets, with reverse lookup by tag value."""

    def add_tag(
        self,
        target_namespace: str,
        target_id: str,
        name: str,
        value: str | None = None,
    ) -> OpResult:
        """Set a tag on a target, replacing any previous value for that name."""
        return self._write(
            f"tag {target_namespace}/{target_id} with {name}",
            """
            INSERT INTO data_tags (target_namespace, target_id, tag_name, tag_value)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(target_namespace, target_id, tag_name) DO UPDATE SET
                tag_value = excluded.tag_value
            """,
            (target_namespace, target_id, name, value),
        )

    def get_tags(self, target_namespace: str, target_id: str) -> dict[str, str | None]:
        """Get every tag on a target as name -> value."""
        rows = self._fetch_all(
            f"retrieve tags for {target_namespace}/{target_id}",
            "SELECT tag_name, tag_value FROM data_tags "
            "WHERE target_namespace = ? AND target_id = ? ORDER BY tag_name",
            (target_namespace, target_id),
        )
        return {row["tag_name"]: row["tag_value"] for row in rows or []}

    def get_tag_records(self, target_namespace: str, target_id: str) -> list[TagRecord]:
        """Get the stored tag rows for a target."""
        rows = self._fetch_all(
            f"retrieve tag records for {target_namespace}/{target_id}",
            "SELECT * FROM data_tags WHERE target_namespace = ? AND target_id = ? ORDER BY tag_name",
            (target_namespace, target_id),
        )
        return [
            TagRecord(
                target_namespace=row["target_namespace"],
                target_id=row["target_id"],
                tag_name=row["tag_name"],
                tag_value=row["tag_value"],
                created_at=row["created_at"],
            )
            for row in rows or []
        ]

    def find_by_tag(
        self,
        target_namespace: str,
        name: str,
        value: str | None = None,
    ) -> list[str]:
        """
        Find every target in a namespace carrying a tag.

        Matches the value exactly; with ``value=None`` only presence-only
        tags match.
        """
        if value is None:
            sql = (
                "SELECT target_id FROM data_tags "
                "WHERE target_namespace = ? AND tag_name = ? AND tag_value IS NULL "
                "ORDER BY target_id"
            )
            params: tuple = (target_namespace, name)
        else:
            sql = (
                "SELECT target_id FROM data_tags "
                "WHERE target_namespace = ? AND tag_name = ? AND tag_value = ? "
                "ORDER BY target_id"
            )
            params = (target_namespace, name, value)

        rows = self._fetch_all(f"find {target_namespace} targets by tag {name}", sql, params)
        return [row["target_id"] for row in rows or []]

    def remove_tag(self, target_namespace: str, target_id: str, name: str) -> DeleteResult:
        """Remove one tag from a target."""
        return self._delete(
            f"remove tag {name} from {target_namespace}/{target_id}",
            "DELETE FROM data_tags WHERE target_namespace = ? AND target_id = ? AND tag_name = ?",
            (target_namespace, target_id, name),
        )

    def clear_tags(self, target_namespace: str, target_id: str) -> DeleteResult:
        """Remove every tag from a target."""
        result = self._delete(
            f"clear tags on {target_namespace}/{target_id}",
            "DELETE FROM data_tags WHERE target_namespace = ? AND target_id = ?",
            (target_namespace, target_id),
        )
        if result.changed:
            logger.debug(f"Cleared {result.affected} tags on {target_namespace}/{target_id}")
        return result
