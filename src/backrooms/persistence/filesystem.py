"""One directory per room, holding a single JSON document."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..errors import RoomNotFoundError, StorageIOError
from ..room import Room, RoomSummary
from .base import PersistenceBackend, decode_room, encode_room

logger = logging.getLogger(__name__)

DOCUMENT_NAME = "room.json"


class FileBackend(PersistenceBackend):
    """Stores each room as ``<root>/<room id>/room.json``."""

    def __init__(self, root: Path | str) -> None:
        """Initialize the backend with its root directory.

        Args:
            root: Directory holding one subdirectory per room.
        """
        self.root = Path(root)

    def _room_dir(self, room_id: str) -> Path:
        """Directory for a room id, refusing ids that escape the root."""
        if not room_id or room_id in (".", "..") or "/" in room_id or "\\" in room_id:
            raise ValueError(f"invalid room id: {room_id!r}")
        return self.root / room_id

    def _document(self, room_id: str) -> Path:
        return self._room_dir(room_id) / DOCUMENT_NAME

    def init(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("init", e) from e

    def list_rooms(self) -> list[RoomSummary]:
        self.init()
        documents: list[tuple[str, str | bytes]] = []
        try:
            for entry in sorted(self.root.iterdir()):
                path = entry / DOCUMENT_NAME
                if not entry.is_dir() or not path.is_file():
                    continue
                documents.append((entry.name, path.read_bytes()))
        except OSError as e:
            raise StorageIOError("list_rooms", e) from e
        return self._summaries(documents)

    def load_room(self, room_id: str) -> Room:
        try:
            path = self._document(room_id)
        except ValueError as e:
            raise RoomNotFoundError(room_id) from e
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise RoomNotFoundError(room_id) from e
        except OSError as e:
            raise StorageIOError("load_room", e, room_id) from e
        return decode_room(raw, room_id)

    def save_room(self, room: Room) -> None:
        directory = self._room_dir(room.id)
        raw = encode_room(room, pretty=True)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            # Write beside the target and swap in, so a failed write leaves
            # the previous document untouched.
            fd, tmp_name = tempfile.mkstemp(prefix=".room-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(raw)
                os.replace(tmp_name, directory / DOCUMENT_NAME)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageIOError("save_room", e, room.id) from e
        logger.debug("Saved room %s to %s", room.id, directory)

    def delete_room(self, room_id: str) -> None:
        try:
            directory = self._room_dir(room_id)
        except ValueError:
            return
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError("delete_room", e, room_id) from e
        logger.debug("Deleted room %s", room_id)
