"""Integration tests for connection management and transactions."""

import sqlite3

import pytest

from hoard.core.errors import ConnectivityError, TransactionError
from hoard.storage.connection import ConnectionManager


class TestConnectionLifecycle:
    """Tests for lazy connect, reuse and reconnect."""

    def test_lazy_open(self, connections):
        assert not connections.is_connected()

        conn = connections.acquire()

        assert connections.is_connected()
        assert connections.acquire() is conn
        assert connections.db_path.exists()

    def test_pragmas_applied(self, connections):
        conn = connections.acquire()

        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 2000

    def test_reconnect_after_close(self, connections):
        first = connections.acquire()
        connections.close()

        assert not connections.is_connected()
        second = connections.acquire()
        assert second is not first
        assert connections.is_connected()

    def test_reconnect_after_external_close(self, connections):
        """Test a connection closed behind the manager's back is replaced."""
        connections.acquire().close()

        conn = connections.acquire()
        assert conn.execute("SELECT 1").fetchone()[0] == 1

    def test_close_twice(self, connections):
        connections.acquire()
        connections.close()
        connections.close()
        assert not connections.is_connected()

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        manager = ConnectionManager(blocker / "nested" / "db.db")

        with pytest.raises(ConnectivityError):
            manager.acquire()


class TestTransactions:
    """Tests for transaction()."""

    @pytest.fixture
    def table(self, connections):
        connections.acquire().execute("CREATE TABLE items (name TEXT NOT NULL)")
        return connections

    @staticmethod
    def _names(connections):
        return [row[0] for row in connections.acquire().execute("SELECT name FROM items ORDER BY name")]

    def test_commit(self, table):
        with table.transaction() as conn:
            conn.execute("INSERT INTO items VALUES ('a')")
            conn.execute("INSERT INTO items VALUES ('b')")
            assert table.in_transaction

        assert not table.in_transaction
        assert self._names(table) == ["a", "b"]

    def test_rollback_on_error(self, table):
        """Test an exception in the block undoes every write and propagates."""
        with pytest.raises(RuntimeError):
            with table.transaction() as conn:
                conn.execute("INSERT INTO items VALUES ('a')")
                raise RuntimeError("boom")

        assert self._names(table) == []
        assert not table.in_transaction
        assert not table.acquire().in_transaction

    def test_rollback_on_sql_error(self, table):
        with pytest.raises(sqlite3.IntegrityError):
            with table.transaction() as conn:
                conn.execute("INSERT INTO items VALUES ('a')")
                conn.execute("INSERT INTO items VALUES (NULL)")

        assert self._names(table) == []

    def test_autocommit_restored(self, table):
        with pytest.raises(RuntimeError):
            with table.transaction():
                raise RuntimeError("boom")

        table.acquire().execute("INSERT INTO items VALUES ('later')")
        assert self._names(table) == ["later"]

    def test_failed_rollback_is_logged(self, table, caplog):
        """Test a rollback that itself fails is logged and the body's error still propagates."""
        with caplog.at_level("ERROR", logger="hoard.storage.connection"):
            with pytest.raises(RuntimeError, match="boom"):
                with table.transaction() as conn:
                    conn.execute("INSERT INTO items VALUES ('lost')")
                    conn.close()
                    raise RuntimeError("boom")

        assert not table.in_transaction
        assert any(
            record.levelname == "ERROR" and "Failed to roll back transaction" in record.message
            for record in caplog.records
        )

        table.acquire().execute("INSERT INTO items VALUES ('after')")
        assert self._names(table) == ["after"]

    def test_nested_transaction_rejected(self, table):
        with table.transaction() as conn:
            conn.execute("INSERT INTO items VALUES ('outer')")
            with pytest.raises(TransactionError):
                with table.transaction():
                    pass

        assert self._names(table) == ["outer"]

    def test_with_transaction(self, table):
        def body(conn):
            conn.execute("INSERT INTO items VALUES ('x')")
            return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]

        assert table.with_transaction(body) == 1
        assert self._names(table) == ["x"]
