"""Backrooms Terminal: persisted rooms with a bounded log and a text-command entity."""

__version__ = "0.1.0"

from .errors import (
    BackendUnsupportedError,
    BackroomsError,
    RoomCorruptedError,
    RoomNotFoundError,
    RoomUnavailableError,
    StorageIOError,
)
from .memory import EntryType, MemoryEntry, MemoryLog
from .persistence import BackendKind, FileBackend, PersistenceBackend, SqliteBackend, open_backend
from .room import (
    Room,
    RoomConfig,
    RoomMetadata,
    RoomState,
    RoomSummary,
    create_room,
    process_input,
    resume,
    suspend,
)

__all__ = [
    "BackendKind",
    "BackendUnsupportedError",
    "BackroomsError",
    "EntryType",
    "FileBackend",
    "MemoryEntry",
    "MemoryLog",
    "PersistenceBackend",
    "Room",
    "RoomConfig",
    "RoomCorruptedError",
    "RoomMetadata",
    "RoomNotFoundError",
    "RoomState",
    "RoomSummary",
    "RoomUnavailableError",
    "SqliteBackend",
    "StorageIOError",
    "create_room",
    "open_backend",
    "process_input",
    "resume",
    "suspend",
]
