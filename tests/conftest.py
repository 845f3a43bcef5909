"""
Pytest configuration and fixtures for Hoard tests.
"""

import os
import tempfile
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import pytest

# Set test environment before importing app modules
os.environ["HOARD_DATA_DIR"] = tempfile.mkdtemp()
os.environ["HOARD_BACKUP_ON_SHUTDOWN"] = "false"

from hoard.core.config import Settings
from hoard.engine import StorageEngine
from hoard.storage.connection import ConnectionManager


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh data directory."""
    return Settings(
        data_dir=tmp_path,
        db_filename="test",
        busy_timeout_ms=2000,
        backup_on_shutdown=False,
        max_backups=3,
    )


@pytest.fixture
def connections(test_settings: Settings) -> Generator[ConnectionManager, None, None]:
    """A connection manager on the test database."""
    manager = ConnectionManager.from_settings(test_settings)
    yield manager
    manager.close()


@pytest.fixture
def engine(test_settings: Settings) -> Generator[StorageEngine, None, None]:
    """A set-up engine on the test database."""
    storage = StorageEngine(test_settings)
    assert storage.setup()
    yield storage
    storage.shutdown(backup=False)


@dataclass
class Hologram:
    """Sample structured object."""

    world: str
    x: float
    y: float
    z: float
    lines: list[str]


@pytest.fixture
def sample_hologram() -> Hologram:
    return Hologram(world="spawn", x=10.5, y=64.0, z=-3.25, lines=["Welcome", "to the server"])


@pytest.fixture
def sample_stats() -> dict:
    """Sample per-player stats of mixed types."""
    return {
        "kills": 7,
        "deaths": 2,
        "play_time": 9_876_543_210,
        "kd_ratio": 3.5,
        "online": True,
        "rank": "veteran",
        "achievements": ["first_blood", "marathon"],
        "settings": {"chat": True, "volume": 80},
        "nickname": None,
    }
