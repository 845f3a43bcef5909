"""
Database connection management.

One ConnectionManager owns one SQLite connection. The connection is opened
lazily, reopened transparently if it was closed, and runs in autocommit
mode except inside ``transaction()``.

The manager does no locking of its own: callers on independent threads
must serialize access themselves or use separate managers.
"""

import sqlite3
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from hoard.core.config import Settings, get_logger
from hoard.core.errors import ConnectivityError, TransactionError

logger = get_logger("storage.connection")

T = TypeVar("T")


class ConnectionManager:
    """
    Lazily (re)connecting owner of the shared SQLite connection.

    States:
    - autocommit: every statement commits on its own
    - in transaction: entered by ``transaction()``, left on commit or rollback
    """

    def __init__(
        self,
        db_path: Path | str,
        busy_timeout_ms: int = 30000,
        log_queries: bool = False,
        debug: bool = False,
    ):
        """Initialize the manager. No connection is opened yet."""
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self.log_queries = log_queries
        self.debug = debug
        self._conn: sqlite3.Connection | None = None
        self._in_transaction = False
        self._opened_once = False

    @classmethod
    def from_settings(cls, config: Settings) -> "ConnectionManager":
        return cls(
            db_path=config.db_path,
            busy_timeout_ms=config.busy_timeout_ms,
            log_queries=config.log_queries,
            debug=config.debug,
        )

    # ============================================
    # Connection Lifecycle
    # ============================================

    def _open(self) -> sqlite3.Connection:
        """Open and configure a new connection."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                self.db_path,
                timeout=self.busy_timeout_ms / 1000.0,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row

            conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute("PRAGMA temp_store = MEMORY")

            if self.log_queries:
                conn.set_trace_callback(lambda sql: logger.debug(f"SQL: {sql}"))
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to open database {self.db_path}: {e}")
            raise ConnectivityError(f"Cannot open {self.db_path}: {e}") from e

        if self._opened_once and self.debug:
            logger.info("Database connection reopened")
        else:
            logger.debug(f"Opened database {self.db_path}")
        self._opened_once = True
        return conn

    @staticmethod
    def _is_alive(conn: sqlite3.Connection) -> bool:
        try:
            _ = conn.total_changes
        except sqlite3.ProgrammingError:
            return False
        return True

    def acquire(self) -> sqlite3.Connection:
        """
        Get the live connection, reconnecting if it was closed.

        Raises:
            ConnectivityError: If the database can't be opened
        """
        if self._conn is None or not self._is_alive(self._conn):
            self._in_transaction = False
            self._conn = self._open()
        return self._conn

    def is_connected(self) -> bool:
        """Whether a live connection is currently held."""
        return self._conn is not None and self._is_alive(self._conn)

    def close(self) -> None:
        """Close the connection. Safe to call when already closed."""
        if self._conn is None:
            return
        try:
            if self._is_alive(self._conn):
                self._conn.close()
                logger.info("Database connection closed")
        except sqlite3.Error as e:
            logger.warning(f"Error closing database connection: {e}")
        finally:
            self._conn = None
            self._in_transaction = False

    # ============================================
    # Transactions
    # ============================================

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def _rollback(self, conn: sqlite3.Connection) -> None:
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.error(f"Failed to roll back transaction: {e}")

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run a block inside a single transaction.

        Commits when the block finishes, rolls back if it raises and
        re-raises the original error. Autocommit is restored either way.
        A failure during rollback is logged, never raised.

        Raises:
            TransactionError: If a transaction is already open
            ConnectivityError: If the database can't be opened
        """
        if self._in_transaction:
            raise TransactionError("A transaction is already open on this connection")

        conn = self.acquire()
        conn.execute("BEGIN")
        self._in_transaction = True
        try:
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            self._rollback(conn)
            raise
        finally:
            self._in_transaction = False
            if self._is_alive(conn) and conn.in_transaction:
                logger.warning("Connection still inside a transaction after close-out, forcing rollback")
                self._rollback(conn)

    def with_transaction(self, body: Callable[[sqlite3.Connection], T]) -> T:
        """Call ``body`` with the connection inside ``transaction()`` and return its result."""
        with self.transaction() as conn:
            return body(conn)
