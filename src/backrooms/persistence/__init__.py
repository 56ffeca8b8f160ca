"""Interchangeable storage backends for rooms."""

from .base import PersistenceBackend, decode_room, encode_room
from .factory import BackendKind, open_backend
from .filesystem import DOCUMENT_NAME, FileBackend
from .sqlite import SqliteBackend

__all__ = [
    "BackendKind",
    "DOCUMENT_NAME",
    "FileBackend",
    "PersistenceBackend",
    "SqliteBackend",
    "decode_room",
    "encode_room",
    "open_backend",
]
