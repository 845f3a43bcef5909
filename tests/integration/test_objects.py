"""Integration tests for the object store."""

from pydantic import BaseModel

from hoard.core.types import DataFormat


class Arena(BaseModel):
    name: str
    capacity: int
    spawn_points: list[tuple[float, float, float]] = []


class TestObjectStore:
    """Tests for whole-object storage."""

    def test_map_round_trip(self, engine):
        assert engine.put_object("holograms", "h1", {"lines": ["a", "b"]})

        assert engine.get_object_as_map("holograms", "h1") == {"lines": ["a", "b"]}
        assert engine.get_object("holograms", "h1") == {"lines": ["a", "b"]}

    def test_dataclass_round_trip(self, engine, sample_hologram):
        engine.put_object("holograms", "welcome", sample_hologram)

        restored = engine.get_object("holograms", "welcome", type(sample_hologram))

        assert restored == sample_hologram

    def test_model_round_trip(self, engine):
        arena = Arena(name="Colosseum", capacity=16, spawn_points=[(0.0, 64.0, 0.0)])
        engine.put_object("arenas", "colosseum", arena)

        assert engine.get_object("arenas", "colosseum", Arena) == arena
        assert engine.get_object_as_map("arenas", "colosseum")["capacity"] == 16

    def test_overwrite_bumps_version(self, engine):
        """Test each overwrite replaces the payload and increments the version."""
        engine.put_object("holograms", "h1", {"lines": ["a"]})
        assert engine.get_object_record("holograms", "h1").version == 1

        engine.put_object("holograms", "h1", {"lines": ["b"]})

        record = engine.get_object_record("holograms", "h1")
        assert record.version == 2
        assert engine.get_object_as_map("holograms", "h1") == {"lines": ["b"]}
        assert engine.list_object_ids("holograms") == ["h1"]

    def test_raw_payload(self, engine):
        engine.put_object("scripts", "motd", "Welcome back!", DataFormat.RAW)

        record = engine.get_object_record("scripts", "motd")
        assert record.format is DataFormat.RAW
        assert engine.get_object("scripts", "motd") == "Welcome back!"
        assert engine.get_object_as_map("scripts", "motd") == {}

    def test_format_given_as_string(self, engine):
        assert engine.put_object("scripts", "motd", b"bytes payload", "RAW")
        assert engine.get_object("scripts", "motd") == "bytes payload"

    def test_missing_object(self, engine):
        assert engine.get_object("holograms", "missing") is None
        assert engine.get_object_record("holograms", "missing") is None
        assert engine.get_object_as_map("holograms", "missing") == {}

    def test_wrong_target_returns_none(self, engine):
        engine.put_object("holograms", "h1", {"lines": ["a"]})
        assert engine.get_object("holograms", "h1", Arena) is None

    def test_non_mapping_as_map(self, engine):
        engine.put_object("lists", "l1", [1, 2, 3])
        assert engine.get_object_as_map("lists", "l1") == {}

    def test_list_and_delete(self, engine):
        engine.put_object("holograms", "b", {})
        engine.put_object("holograms", "a", {})
        engine.put_object("other", "c", {})

        assert engine.list_object_ids("holograms") == ["a", "b"]

        assert engine.delete_object("holograms", "a")
        assert engine.list_object_ids("holograms") == ["b"]

        missing = engine.delete_object("holograms", "a")
        assert not missing
        assert missing.success
