# tests/test_store.py
"""
Tests for the SQLite store.

IMPORTANT ARCHITECTURE RULE (enforced here):
- exline.db is the *only* entry point that creates/ensures schema.
- exline.store (SQLiteStore) must NOT create schema. It assumes schema
  exists and only performs CRUD against existing tables.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from exline import db as exline_db
from exline.store import SQLiteStore


@pytest.fixture
def tmp_db(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def ensured_db(tmp_db: Path) -> Path:
    exline_db.ensure_schema(tmp_db)
    return tmp_db


@pytest.fixture
def store(ensured_db: Path) -> SQLiteStore:
    return SQLiteStore(ensured_db)


def _tables(db_path: Path) -> set[str]:
    conn = sqlite3.connect(str(db_path))
    try:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


# ----------------------------------------------------------------
# Schema authority / initialization boundaries
# ----------------------------------------------------------------


def test_store_does_not_create_schema_on_init(tmp_db: Path) -> None:
    _ = SQLiteStore(tmp_db)

    tables = _tables(tmp_db)
    assert "command_history" not in tables
    assert "settings" not in tables


def test_store_operations_fail_without_schema(tmp_db: Path) -> None:
    s = SQLiteStore(tmp_db)

    with pytest.raises(sqlite3.OperationalError):
        _ = s.list_commands()


def test_ensure_schema_is_idempotent(tmp_db: Path) -> None:
    exline_db.ensure_schema(tmp_db)
    exline_db.ensure_schema(tmp_db)

    assert {"command_history", "settings"} <= _tables(tmp_db)


def test_ensure_schema_creates_parent_directory(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "dir" / "session.db"

    exline_db.ensure_schema(db_path)

    assert db_path.exists()


# ----------------------------------------------------------------
# Command history
# ----------------------------------------------------------------


def test_list_commands_empty_initially(store: SQLiteStore) -> None:
    assert store.list_commands() == []


def test_append_commands_preserves_order(store: SQLiteStore) -> None:
    store.append_commands(["w", "q"])
    store.append_commands(["w"])

    assert store.list_commands() == ["w", "q", "w"]


def test_append_nothing_is_noop(store: SQLiteStore) -> None:
    store.append_commands([])

    assert store.list_commands() == []


# ----------------------------------------------------------------
# Settings
# ----------------------------------------------------------------


def test_get_setting_returns_default_when_missing(store: SQLiteStore) -> None:
    assert store.get_setting("missing", "fallback") == "fallback"


def test_set_setting_overwrites(store: SQLiteStore) -> None:
    store.set_setting("k", "1")
    store.set_setting("k", "2")

    assert store.get_setting("k", "") == "2"
