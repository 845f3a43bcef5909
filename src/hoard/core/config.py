"""
Configuration management for Hoard.

Uses pydantic-settings for environment variable binding.
All settings can be overridden via environment variables with HOARD_ prefix.
"""

import logging
import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storage settings with environment variable binding."""

    model_config = SettingsConfigDict(
        env_prefix="HOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================
    # Database File
    # ==========================================
    data_dir: Path = Path.home() / ".hoard"
    """Directory holding the database file and its backups."""

    db_filename: str = "players"
    """Database file name without the .db suffix."""

    # ==========================================
    # Connection
    # ==========================================
    busy_timeout_ms: int = 30000
    """How long a blocked write waits on a locked database before failing."""

    use_connection_pool: bool = True
    """Reserved. The engine keeps a single shared connection."""

    max_connections: int = 10
    """Reserved for a pooled connection manager."""

    # ==========================================
    # Debugging
    # ==========================================
    debug: bool = False
    log_queries: bool = False
    """Emit every executed SQL statement at DEBUG level."""

    # ==========================================
    # Backups
    # ==========================================
    backup_on_shutdown: bool = True
    max_backups: int = 5
    backup_dir_name: str = "backups"

    # ==========================================
    # Logging
    # ==========================================
    log_level: str = "INFO"
    log_file: Path | None = None

    # ==========================================
    # Computed Properties
    # ==========================================
    @property
    def db_path(self) -> Path:
        return self.data_dir / f"{self.db_filename}.db"

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / self.backup_dir_name

    @property
    def busy_timeout_seconds(self) -> float:
        return self.busy_timeout_ms / 1000.0

    def ensure_directories(self) -> None:
        """Create the data and backup directories if they don't exist."""
        for directory in [self.data_dir, self.backup_dir]:
            directory.mkdir(parents=True, exist_ok=True)


# Default settings instance, read from the environment
settings = Settings()


def setup_logging(level: str | None = None, config: Settings | None = None) -> None:
    """Configure application logging."""
    config = config or settings
    log_level = level or ("DEBUG" if config.debug else config.log_level)

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
    ]

    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"hoard.{name}")
