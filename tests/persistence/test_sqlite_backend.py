"""Tests specific to the SQLite backend."""

import sqlite3
from pathlib import Path

import pytest

from backrooms.errors import RoomCorruptedError
from backrooms.persistence import SqliteBackend
from backrooms.room import create_room, suspend

NOW = 1_700_000_000


@pytest.fixture
def backend(tmp_path: Path) -> SqliteBackend:
    b = SqliteBackend(tmp_path / "rooms.db")
    b.init()
    return b


def query(backend: SqliteBackend, sql: str, *params) -> list[tuple]:
    conn = sqlite3.connect(backend.db_path)
    try:
        return conn.execute(sql, params).fetchall()
    finally:
        conn.close()


def test_creates_db_directory(tmp_path: Path):
    path = tmp_path / "nested" / "dir" / "rooms.db"
    SqliteBackend(path).init()
    assert path.exists()


def test_creates_rooms_table(backend: SqliteBackend):
    rows = query(backend, "SELECT name FROM sqlite_master WHERE type='table' AND name='rooms'")
    assert rows == [("rooms",)]


def test_creates_state_index(backend: SqliteBackend):
    rows = query(backend, "SELECT name FROM sqlite_master WHERE type='index' AND name='idx_rooms_state'")
    assert rows == [("idx_rooms_state",)]


def test_denormalized_columns(backend: SqliteBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    room.last_active = NOW + 50
    suspend(room)
    backend.save_room(room)

    rows = query(backend, "SELECT id, state, created_at, last_active FROM rooms")
    assert rows == [(room.id, "SUSPENDED", NOW, NOW + 50)]


def test_corrupted_row(backend: SqliteBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    conn = sqlite3.connect(backend.db_path)
    with conn:
        conn.execute("UPDATE rooms SET room_json = ? WHERE id = ?", ("[broken", room.id))
    conn.close()

    with pytest.raises(RoomCorruptedError):
        backend.load_room(room.id)


def test_list_skips_corrupted_rows(backend: SqliteBackend):
    good, bad = create_room(now=NOW), create_room(now=NOW)
    backend.save_room(good)
    backend.save_room(bad)
    conn = sqlite3.connect(backend.db_path)
    with conn:
        conn.execute("UPDATE rooms SET room_json = '{}' WHERE id = ?", (bad.id,))
    conn.close()

    assert [s.id for s in backend.list_rooms()] == [good.id]


def test_shared_across_handles(tmp_path: Path):
    path = tmp_path / "rooms.db"
    first, second = SqliteBackend(path), SqliteBackend(path)
    first.init()
    second.init()
    room = create_room(now=NOW)
    first.save_room(room)
    assert second.load_room(room.id) == room
