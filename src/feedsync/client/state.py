"""Local data store for sync clients.

This module provides:
- DataStore: SQLite-based key/value store owned by one syncer

Concrete sync protocols keep their own tables next to the settings table;
the core only reads the connection preferences from it.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

HTTPS_CONNECTION_KEY = "https_connection"


class DataStore:
    """SQLite-based settings store for a syncer instance."""

    def __init__(self, db_path: Path) -> None:
        """Initialize the data store.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        # Lock for thread-safe database access
        self._lock = threading.RLock()

        self._conn = sqlite3.connect(
            str(self._db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)

    @property
    def path(self) -> Path:
        """Location of the database file."""
        return self._db_path

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> DataStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Settings ===

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        """Get a setting value.

        Args:
            key: Setting name.
            default: Value returned when the setting is absent.

        Returns:
            Stored value or default.
        """
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM settings WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return default
        return str(row["value"])

    def set_setting(self, key: str, value: str) -> None:
        """Set a setting value (upsert)."""
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (key, value),
            )
        logger.debug("Setting %s updated", key)

    def delete_setting(self, key: str) -> bool:
        """Delete a setting.

        Returns:
            True if the setting existed.
        """
        with self._lock:
            cursor = self._conn.execute("DELETE FROM settings WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def is_https_connection(self) -> bool:
        """Whether queries should use HTTPS (defaults to True)."""
        value = self.get_setting(HTTPS_CONNECTION_KEY)
        if value is None:
            return True
        return value == "1"

    def set_https_connection(self, enabled: bool) -> None:
        """Store the HTTPS preference."""
        self.set_setting(HTTPS_CONNECTION_KEY, "1" if enabled else "0")
