"""Integration tests for keyed value storage."""

from typing import Any

import pytest

from hoard.storage.keyed import GLOBAL_IDENTITY


class TestPutAndGet:
    """Tests for single-value writes and typed reads."""

    def test_upsert_replaces_value(self, engine):
        """Test a second put overwrites instead of duplicating."""
        assert engine.put("stats", "player-42", "kills", 7)
        assert engine.put("stats", "player-42", "kills", 9)

        assert engine.get("stats", "player-42", "kills", int) == 9

        result = engine.raw_query(
            "SELECT COUNT(*) AS count FROM data_storage WHERE namespace = ? AND identity = ?",
            "stats", "player-42",
        )
        assert result.rows[0]["count"] == 1

    def test_mixed_types_round_trip(self, engine, sample_stats):
        for key, value in sample_stats.items():
            assert engine.put("stats", "player-42", key, value)

        assert engine.get("stats", "player-42", "kills", int) == 7
        assert engine.get("stats", "player-42", "play_time", int) == 9_876_543_210
        assert engine.get("stats", "player-42", "kd_ratio", float) == 3.5
        assert engine.get("stats", "player-42", "online", bool) is True
        assert engine.get("stats", "player-42", "rank", str) == "veteran"
        assert engine.get("stats", "player-42", "achievements", list[str]) == ["first_blood", "marathon"]
        assert engine.get("stats", "player-42", "settings", dict[str, Any]) == {"chat": True, "volume": 80}
        assert engine.get("stats", "player-42", "nickname", str) is None

    def test_type_tags_are_stored(self, engine):
        engine.put("stats", "p1", "small", 5)
        engine.put("stats", "p1", "big", 2**40)
        engine.put("stats", "p1", "nothing", None)

        assert engine.get_record("stats", "p1", "small").value_type == "INTEGER"
        assert engine.get_record("stats", "p1", "big").value_type == "LONG"

        record = engine.get_record("stats", "p1", "nothing")
        assert record.value_type == "NULL"
        assert record.value is None

    def test_metadata_is_kept(self, engine):
        engine.put("stats", "p1", "kills", 1, metadata="imported")
        assert engine.get_record("stats", "p1", "kills").metadata == "imported"

    def test_missing_key_returns_default(self, engine):
        assert engine.get("stats", "nobody", "kills", int) is None
        assert engine.get("stats", "nobody", "kills", int, default=0) == 0

    def test_undecodable_value_returns_default(self, engine):
        """Test a value that can't become the target type falls back to the default."""
        engine.put("stats", "p1", "rank", "veteran")
        assert engine.get("stats", "p1", "rank", int, default=-1) == -1

    def test_identities_and_namespaces_are_isolated(self, engine):
        engine.put("stats", "p1", "kills", 1)
        engine.put("stats", "p2", "kills", 2)
        engine.put("economy", "p1", "kills", 3)

        assert engine.get("stats", "p1", "kills", int) == 1
        assert engine.get("stats", "p2", "kills", int) == 2
        assert engine.get("economy", "p1", "kills", int) == 3


class TestGetAll:
    """Tests for reading every value of an identity."""

    def test_empty_identity(self, engine):
        assert engine.get_all("stats", "nobody") == {}

    def test_natural_types(self, engine, sample_stats):
        engine.put_batch("stats", "player-42", sample_stats)

        values = engine.get_all("stats", "player-42")

        assert values == sample_stats
        assert list(values) == sorted(sample_stats)

    def test_bad_value_does_not_spoil_others(self, engine):
        """Test one undecodable row comes back as None while the rest decode."""
        engine.put("stats", "p1", "kills", 4)
        engine.raw_execute(
            "INSERT INTO data_storage (namespace, identity, data_key, data_value, value_type) "
            "VALUES (?, ?, ?, ?, ?)",
            "stats", "p1", "broken", "not a number", "INTEGER",
        )

        values = engine.get_all("stats", "p1")

        assert values == {"broken": None, "kills": 4}


class TestBatch:
    """Tests for transactional batch writes."""

    def test_batch_writes_every_key(self, engine):
        result = engine.put_batch("stats", "p1", {"kills": 3, "deaths": 1, "rank": "new"})

        assert result.success
        assert result.affected == 3
        assert engine.get_all("stats", "p1") == {"deaths": 1, "kills": 3, "rank": "new"}

    def test_batch_upserts_existing_keys(self, engine):
        engine.put("stats", "p1", "kills", 3)
        engine.put_batch("stats", "p1", {"kills": 10, "deaths": 4})

        assert engine.get("stats", "p1", "kills", int) == 10
        assert len(engine.keyed.get_records("stats", "p1")) == 2

    def test_empty_batch_is_a_no_op(self, engine):
        result = engine.put_batch("stats", "p1", {})
        assert result.success
        assert not result.changed

    def test_failed_batch_rolls_back(self, engine):
        """Test a failing statement mid-batch leaves nothing behind."""
        engine.put("stats", "p1", "kills", 1)

        result = engine.put_batch("stats", "p1", {"kills": 50, "deaths": 5, None: "boom"})

        assert not result.success
        assert "rolled back" in result.error
        assert engine.get_all("stats", "p1") == {"kills": 1}
        assert not engine.connections.in_transaction

    def test_store_usable_after_failed_batch(self, engine):
        engine.put_batch("stats", "p1", {"kills": 1, None: 2})

        assert engine.put("stats", "p1", "kills", 2)
        assert engine.get("stats", "p1", "kills", int) == 2


class TestDelete:
    """Tests for deletes."""

    def test_delete_identity(self, engine):
        engine.put_batch("stats", "p1", {"kills": 1, "deaths": 2})
        engine.put("stats", "p2", "kills", 5)

        result = engine.delete("stats", "p1")

        assert result.changed
        assert result.affected == 2
        assert not engine.has_data("stats", "p1")
        assert engine.has_data("stats", "p2")

    def test_delete_key(self, engine):
        engine.put_batch("stats", "p1", {"kills": 1, "deaths": 2})

        assert engine.delete_key("stats", "p1", "kills").changed
        assert engine.get_all("stats", "p1") == {"deaths": 2}

    def test_delete_missing_is_falsy(self, engine):
        """Test deleting nothing succeeds but reads as nothing removed."""
        result = engine.delete_key("stats", "nobody", "kills")

        assert result.success
        assert result.error is None
        assert result.affected == 0
        assert not result

        assert not engine.delete("stats", "nobody")

    def test_delete_existing_is_truthy(self, engine):
        engine.put("stats", "p1", "kills", 1)

        assert engine.delete_key("stats", "p1", "kills")

    def test_delete_failure_carries_error(self, engine):
        engine.raw_execute("DROP TABLE data_storage")

        result = engine.delete("stats", "p1")

        assert not result
        assert not result.success
        assert "no such table" in result.error


class TestListings:
    """Tests for namespace and identity listings."""

    def test_has_data(self, engine):
        assert not engine.has_data("stats", "p1")
        engine.put("stats", "p1", "kills", 0)
        assert engine.has_data("stats", "p1")

    def test_list_namespaces(self, engine):
        engine.put("stats", "p1", "kills", 1)
        engine.put("economy", "p1", "balance", 10.0)
        engine.put("stats", "p2", "kills", 2)

        assert engine.list_namespaces() == ["economy", "stats"]

    def test_list_identities(self, engine):
        engine.put("stats", "p2", "kills", 1)
        engine.put("stats", "p1", "kills", 2)
        engine.put("economy", "p3", "balance", 1)

        assert engine.list_identities("stats") == ["p1", "p2"]
        assert engine.list_identities("missing") == []


class TestGlobals:
    """Tests for namespace-wide values."""

    def test_put_and_get_global(self, engine):
        assert engine.put_global("economy", "tax_rate", 0.05)

        assert engine.get_global("economy", "tax_rate", float) == 0.05
        assert engine.get("economy", GLOBAL_IDENTITY, "tax_rate", float) == 0.05

    def test_missing_global_default(self, engine):
        assert engine.get_global("economy", "tax_rate", float, default=0.0) == 0.0

    @pytest.mark.parametrize("value", [1, "text", [1, 2], {"a": "b"}])
    def test_globals_keep_type(self, engine, value):
        engine.put_global("config", "value", value)
        assert engine.get_global("config", "value") == value
