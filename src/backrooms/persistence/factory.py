"""Backend selection by configured label."""

from enum import Enum
from pathlib import Path

from ..errors import BackendUnsupportedError
from .base import PersistenceBackend
from .filesystem import FileBackend
from .sqlite import SqliteBackend


class BackendKind(str, Enum):
    """Backend labels accepted in configuration."""

    FILESYSTEM = "FILESYSTEM"
    SQLITE = "SQLITE"
    LEVELDB = "LEVELDB"
    REDIS = "REDIS"

    @classmethod
    def parse(cls, label: "str | BackendKind") -> "BackendKind":
        """Resolve a label case-insensitively.

        Raises:
            BackendUnsupportedError: If the label names no known backend.
        """
        if isinstance(label, cls):
            return label
        try:
            return cls(str(label).strip().upper())
        except ValueError:
            raise BackendUnsupportedError(str(label)) from None


_IMPLEMENTATIONS: dict[BackendKind, type[PersistenceBackend]] = {
    BackendKind.FILESYSTEM: FileBackend,
    BackendKind.SQLITE: SqliteBackend,
}


def open_backend(kind: "str | BackendKind", location: Path | str) -> PersistenceBackend:
    """Construct the backend for a label.

    Unimplemented labels are rejected here, before any storage is touched.

    Args:
        kind: Backend label, e.g. "FILESYSTEM" or "sqlite".
        location: Root directory or database file for the backend.

    Returns:
        An uninitialized backend. Call init() before use.

    Raises:
        BackendUnsupportedError: If the backend has no implementation.
    """
    backend_kind = BackendKind.parse(kind)
    implementation = _IMPLEMENTATIONS.get(backend_kind)
    if implementation is None:
        raise BackendUnsupportedError(backend_kind.value)
    return implementation(location)
