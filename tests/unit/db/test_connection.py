"""Tests for the Database connection layer."""

from __future__ import annotations

import sqlite3

from docrag.db.connection import Database


def test_connect_creates_file(tmp_path):
    db_path = tmp_path / ".docrag.db"
    conn = Database(db_path).connect()
    conn.close()
    assert db_path.exists()


def test_sqlite_vec_loads(tmp_path):
    conn = Database(tmp_path / ".docrag.db").connect()
    version = conn.execute("SELECT vec_version()").fetchone()[0]
    conn.close()
    assert version.startswith("v")


def test_wal_journal_mode(tmp_path):
    conn = Database(tmp_path / ".docrag.db").connect()
    mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    conn.close()
    assert mode == "wal"


def test_row_factory_is_row(tmp_path):
    conn = Database(tmp_path / ".docrag.db").connect()
    row = conn.execute("SELECT 1 AS one").fetchone()
    conn.close()
    assert isinstance(row, sqlite3.Row)
    assert row["one"] == 1


def test_context_manager_closes(tmp_path):
    db = Database(tmp_path / ".docrag.db")
    with db as conn:
        conn.execute("SELECT 1")
    assert db._conn is None


def test_connect_creates_parent_directories(tmp_path):
    db = Database(tmp_path / "data" / "nested" / "rag.db")
    assert not db.exists
    db.connect().close()
    assert db.exists


def test_exists_false_for_directory(tmp_path):
    assert not Database(tmp_path).exists


def test_foreign_keys_enabled(tmp_path):
    with Database(tmp_path / ".docrag.db") as conn:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
