"""
Database backups.

Copies the live database with SQLite's online backup API so a backup
can be taken while the connection is open, then prunes the backup
directory down to the configured maximum.
"""

import sqlite3
from datetime import datetime
from pathlib import Path

from hoard.core.config import Settings, get_logger

logger = get_logger("storage.backup")

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def list_backups(config: Settings) -> list[Path]:
    """List backups for the configured database, oldest first."""
    if not config.backup_dir.exists():
        return []

    backups = [
        path for path in config.backup_dir.glob(f"{config.db_filename}_*.db")
        if path.is_file()
    ]
    return sorted(backups, key=lambda path: (path.stat().st_mtime, path.name))


def create_backup(conn: sqlite3.Connection, config: Settings) -> Path | None:
    """
    Write a timestamped copy of the database into the backup directory.

    Args:
        conn: Live connection to the database being backed up
        config: Settings naming the database and backup directory

    Returns:
        Path of the new backup, or None if it failed
    """
    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    backup_path = config.backup_dir / f"{config.db_filename}_{timestamp}.db"

    try:
        config.backup_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create backup directory {config.backup_dir}: {e}")
        return None

    try:
        target = sqlite3.connect(backup_path)
        try:
            conn.backup(target)
        finally:
            target.close()
    except (sqlite3.Error, OSError) as e:
        logger.error(f"Failed to create database backup: {e}")
        try:
            backup_path.unlink(missing_ok=True)
        except OSError:
            logger.warning(f"Could not remove partial backup {backup_path.name}")
        return None

    logger.info(f"Database backup created: {backup_path.name}")
    cleanup_old_backups(config)
    return backup_path


def cleanup_old_backups(config: Settings) -> int:
    """Delete the oldest backups beyond ``max_backups``. Returns how many were removed."""
    backups = list_backups(config)
    excess = len(backups) - max(config.max_backups, 0)
    if excess <= 0:
        return 0

    removed = 0
    for path in backups[:excess]:
        try:
            path.unlink()
            removed += 1
            logger.info(f"Deleted old backup: {path.name}")
        except OSError as e:
            logger.warning(f"Failed to delete old backup {path.name}: {e}")
    return removed
