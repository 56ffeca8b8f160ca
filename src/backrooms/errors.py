"""Exceptions raised by room storage and the room lifecycle.

Size-exceeded input is not an exception: the interpreter answers it with a
normal response and an ERROR log entry.
"""


class BackroomsError(Exception):
    """Base class for all room system errors."""

    def __init__(self, message: str, room_id: str | None = None, operation: str | None = None) -> None:
        self.room_id = room_id
        self.operation = operation
        super().__init__(message)


class RoomNotFoundError(BackroomsError):
    """No stored record exists for the requested room id."""

    def __init__(self, room_id: str, operation: str = "load_room") -> None:
        super().__init__(f"room not found: {room_id}", room_id=room_id, operation=operation)


class RoomCorruptedError(BackroomsError):
    """A stored room document could not be turned back into a Room."""

    def __init__(self, room_id: str, reason: str, operation: str = "load_room") -> None:
        self.reason = reason
        super().__init__(
            f"room {room_id} is corrupted ({operation}): {reason}",
            room_id=room_id,
            operation=operation,
        )


class StorageIOError(BackroomsError):
    """The underlying read or write failed."""

    def __init__(self, operation: str, error: Exception, room_id: str | None = None) -> None:
        target = f" room {room_id}" if room_id else ""
        super().__init__(f"storage failure during {operation}{target}: {error}", room_id=room_id, operation=operation)


class BackendUnsupportedError(BackroomsError):
    """The selected persistence backend has no implementation."""

    def __init__(self, backend: str) -> None:
        self.backend = backend
        super().__init__(f"{backend} backend not implemented", operation="open_backend")


class RoomUnavailableError(BackroomsError):
    """The room's lifecycle state does not allow entering it."""

    def __init__(self, room_id: str, state: str) -> None:
        self.state = state
        super().__init__(f"room {room_id} is {state}", room_id=room_id, operation="enter")
