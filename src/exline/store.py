# ExLine: Vim-Style Command-Line Layer for Modal Editing
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLite-backed storage implementation for ExLine.

Handles command history rows and key-value settings.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path


class SQLiteStore:
    """SQLite implementation of the HistoryBackend and KeyValueStore
    protocols."""

    def __init__(self, db_path: Path):
        """Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (must have schema)

        Note:
            Store does NOT create schema. Schema must be created by
            db.ensure_schema() before constructing SQLiteStore.
        """
        self.db_path = db_path

        db_path.parent.mkdir(parents=True, exist_ok=True)

    # ----------------------------------------------------------------
    # Command history
    # ----------------------------------------------------------------

    def list_commands(self) -> list[str]:
        """Return every recorded command, oldest first."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            cur = conn.execute(
                "SELECT command FROM command_history ORDER BY id ASC"
            )
            return [row[0] for row in cur.fetchall()]
        finally:
            conn.close()

    def append_commands(self, commands: list[str]) -> None:
        """Append commands in order."""
        if not commands:
            return
        conn = sqlite3.connect(str(self.db_path))
        try:
            now = datetime.now().isoformat()
            conn.executemany(
                """
                INSERT INTO command_history (command, created_at)
                VALUES (?, ?)
                """,
                [(command, now) for command in commands],
            )
            conn.commit()
        finally:
            conn.close()

    # ----------------------------------------------------------------
    # Settings operations
    # ----------------------------------------------------------------

    def get_setting(self, key: str, default: str) -> str:
        """Get a setting from persistent storage."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            cur = conn.execute(
                "SELECT value FROM settings WHERE key = ?",
                (key,),
            )
            row = cur.fetchone()
            return row[0] if row else default
        finally:
            conn.close()

    def set_setting(self, key: str, value: str) -> None:
        """Set a setting in persistent storage."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """
                INSERT OR REPLACE INTO settings (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, value, now),
            )
            conn.commit()
        finally:
            conn.close()
