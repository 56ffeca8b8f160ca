"""Storage contract shared by all room backends."""

import json
import logging
from abc import ABC, abstractmethod

from ..errors import RoomCorruptedError
from ..room import Room, RoomSummary

logger = logging.getLogger(__name__)


def encode_room(room: Room, *, pretty: bool = False) -> str:
    """Serialize a room to its JSON document."""
    return json.dumps(room.to_dict(), indent=2 if pretty else None, ensure_ascii=False)


def decode_room(raw: str | bytes, room_id: str, operation: str = "load_room") -> Room:
    """Parse a stored JSON document back into a Room.

    Args:
        raw: The document, as text or as UTF-8 bytes.
        room_id: Id the document was stored under, for error reports.
        operation: Operation name recorded on errors.

    Raises:
        RoomCorruptedError: If the document is not valid UTF-8 or JSON, holds
            non-finite or absurdly nested values, or does not have the room
            shape.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        return Room.from_dict(json.loads(text))
    except (
        UnicodeDecodeError,
        json.JSONDecodeError,
        AttributeError,
        KeyError,
        TypeError,
        ValueError,
        OverflowError,
        RecursionError,
    ) as e:
        raise RoomCorruptedError(room_id, f"{type(e).__name__}: {e}", operation) from e


class PersistenceBackend(ABC):
    """Loads and saves whole room documents.

    Implementations must tolerate concurrent use for different room ids.
    Concurrent writers of the same id race; the last save wins.
    """

    @abstractmethod
    def init(self) -> None:
        """Create the storage location or schema if absent. Idempotent."""
        ...

    @abstractmethod
    def list_rooms(self) -> list[RoomSummary]:
        """Summaries of all readable stored rooms, in backend order.

        Records that cannot be decoded are skipped with a warning.
        """
        ...

    @abstractmethod
    def load_room(self, room_id: str) -> Room:
        """Load a room.

        Raises:
            RoomNotFoundError: If no record exists for room_id.
            RoomCorruptedError: If the record cannot be decoded.
            StorageIOError: If the read fails.
        """
        ...

    @abstractmethod
    def save_room(self, room: Room) -> None:
        """Insert or fully replace the stored record for room.id."""
        ...

    @abstractmethod
    def delete_room(self, room_id: str) -> None:
        """Remove every stored trace of room_id. Missing ids are not an error."""
        ...

    def _summaries(self, documents: list[tuple[str, str | bytes]]) -> list[RoomSummary]:
        """Decode (room_id, raw) pairs into summaries, skipping bad records."""
        summaries = []
        for room_id, raw in documents:
            try:
                room = decode_room(raw, room_id, operation="list_rooms")
            except RoomCorruptedError as e:
                logger.warning("Skipping unreadable room %s: %s", room_id, e.reason)
                continue
            summaries.append(RoomSummary.from_room(room))
        return summaries
