"""Shared plumbing for the table stores."""

import sqlite3
from collections.abc import Sequence
from typing import Any

from hoard.core.config import get_logger
from hoard.core.errors import StorageError, WriteError
from hoard.core.types import DeleteResult, OpResult
from hoard.storage.connection import ConnectionManager

logger = get_logger("storage")


class BaseStore:
    """
    Base class for stores sharing one ConnectionManager.

    Failures are caught here and turned into OpResult / None returns, so
    no storage error ever reaches the caller as an exception.
    """

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    def _write(
        self,
        action: str,
        sql: str,
        params: Sequence[Any] = (),
        result_type: type[OpResult] = OpResult,
    ) -> OpResult:
        """Execute a single write statement."""
        try:
            cursor = self.connections.acquire().execute(sql, params)
        except sqlite3.Error as e:
            error = WriteError(f"Failed to {action}: {e}")
            logger.error(str(error))
            return result_type.failed(error)
        except StorageError as e:
            logger.error(f"Failed to {action}: {e}")
            return result_type.failed(e)
        return result_type.ok(affected=max(cursor.rowcount, 0))

    def _delete(self, action: str, sql: str, params: Sequence[Any] = ()) -> DeleteResult:
        """Execute a delete; the result is truthy only if rows were removed."""
        return self._write(action, sql, params, result_type=DeleteResult)

    def _fetch_all(self, action: str, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row] | None:
        """Run a query, returning None if it failed."""
        try:
            return self.connections.acquire().execute(sql, params).fetchall()
        except (sqlite3.Error, StorageError) as e:
            logger.error(f"Failed to {action}: {e}")
            return None

    def _fetch_one(self, action: str, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        """Run a query for a single row, returning None if missing or failed."""
        rows = self._fetch_all(action, sql, params)
        return rows[0] if rows else None
