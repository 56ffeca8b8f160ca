"""Tests specific to the file-per-room backend."""

import json
from pathlib import Path

import pytest

from backrooms.errors import RoomCorruptedError, RoomNotFoundError, StorageIOError
from backrooms.persistence import DOCUMENT_NAME, FileBackend
from backrooms.room import create_room

NOW = 1_700_000_000


@pytest.fixture
def backend(tmp_path: Path) -> FileBackend:
    b = FileBackend(tmp_path / "rooms")
    b.init()
    return b


def test_init_creates_root(tmp_path: Path):
    root = tmp_path / "nested" / "rooms"
    FileBackend(root).init()
    assert root.is_dir()


def test_layout(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    room_dir = backend.root / room.id
    assert [p.name for p in room_dir.iterdir()] == [DOCUMENT_NAME]
    assert json.loads((room_dir / DOCUMENT_NAME).read_text())["id"] == room.id


def test_corrupted_document(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    (backend.root / room.id / DOCUMENT_NAME).write_text("{not json")
    with pytest.raises(RoomCorruptedError) as exc:
        backend.load_room(room.id)
    assert exc.value.room_id == room.id
    assert exc.value.operation == "load_room"


def test_wrong_shape_is_corrupted(backend: FileBackend):
    (backend.root / "odd").mkdir()
    (backend.root / "odd" / DOCUMENT_NAME).write_text(json.dumps({"id": "odd"}))
    with pytest.raises(RoomCorruptedError):
        backend.load_room("odd")


def test_list_skips_bad_entries(backend: FileBackend):
    good = create_room(now=NOW)
    backend.save_room(good)
    (backend.root / "broken").mkdir()
    (backend.root / "broken" / DOCUMENT_NAME).write_text("garbage")
    (backend.root / "empty-dir").mkdir()
    (backend.root / "stray.txt").write_text("not a room")

    assert [s.id for s in backend.list_rooms()] == [good.id]


def test_directory_without_document_is_missing(backend: FileBackend):
    (backend.root / "hollow").mkdir()
    with pytest.raises(RoomNotFoundError):
        backend.load_room("hollow")


def test_delete_removes_directory(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    backend.delete_room(room.id)
    assert not (backend.root / room.id).exists()


@pytest.mark.parametrize("bad_id", ["", ".", "..", "../escape", "a/b"])
def test_path_like_ids(backend: FileBackend, bad_id: str):
    with pytest.raises(RoomNotFoundError):
        backend.load_room(bad_id)
    backend.delete_room(bad_id)


def test_no_temp_files_left(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    backend.save_room(room)
    assert [p.name for p in (backend.root / room.id).iterdir()] == [DOCUMENT_NAME]


def test_unreadable_root_reports_storage_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StorageIOError) as exc:
        FileBackend(blocker / "rooms").init()
    assert exc.value.operation == "init"


def test_invalid_utf8_document_is_corrupted(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    (backend.root / room.id / DOCUMENT_NAME).write_bytes(b"\xff\xfe{")
    with pytest.raises(RoomCorruptedError) as exc:
        backend.load_room(room.id)
    assert exc.value.reason.startswith("UnicodeDecodeError")


def test_list_skips_invalid_utf8(backend: FileBackend):
    good = create_room(now=NOW)
    backend.save_room(good)
    (backend.root / "binary").mkdir()
    (backend.root / "binary" / DOCUMENT_NAME).write_bytes(b"\xff\xfe{")

    assert [s.id for s in backend.list_rooms()] == [good.id]


def test_non_finite_number_is_corrupted(backend: FileBackend):
    room = create_room(now=NOW)
    backend.save_room(room)
    path = backend.root / room.id / DOCUMENT_NAME
    data = json.loads(path.read_text())
    data["created_at"] = float("inf")
    path.write_text(json.dumps(data))

    with pytest.raises(RoomCorruptedError) as exc:
        backend.load_room(room.id)
    assert exc.value.reason.startswith("OverflowError")
    assert backend.list_rooms() == []


def test_deeply_nested_document_is_corrupted(backend: FileBackend):
    (backend.root / "deep").mkdir()
    (backend.root / "deep" / DOCUMENT_NAME).write_text("[" * 200_000 + "]" * 200_000)
    with pytest.raises(RoomCorruptedError):
        backend.load_room("deep")
    assert backend.list_rooms() == []
