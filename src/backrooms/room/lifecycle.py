"""Room creation and lifecycle transitions.

Transitions mutate the room in place; persisting the result is the caller's
job.
"""

import hashlib
import logging
import time
import uuid

from ..entity import EntityState
from ..errors import RoomUnavailableError
from ..memory import MemoryLog
from .models import Room, RoomConfig, RoomMetadata, RoomState

logger = logging.getLogger(__name__)

# States in which a room refuses input.
UNAVAILABLE_STATES = frozenset({RoomState.SUSPENDED, RoomState.CORRUPTED})


def now_ts() -> int:
    """Current time in whole epoch seconds."""
    return int(time.time())


def make_room_id(origin: str, now: int | None = None) -> str:
    """Derive a fresh room id from the creation time, a random seed and origin.

    Args:
        origin: Free-form provenance string, e.g. "pid:1 user:u host:h".
        now: Creation time in epoch seconds. Defaults to the current time.

    Returns:
        A 64 character hex digest.
    """
    ts = now_ts() if now is None else now
    digest = hashlib.sha256()
    digest.update(str(ts).encode())
    digest.update(str(uuid.uuid4()).encode())
    digest.update(origin.encode())
    return digest.hexdigest()


def create_room(
    config: RoomConfig | None = None,
    *,
    pid: int = 0,
    user: str = "unknown",
    host: str = "unknown",
    now: int | None = None,
) -> Room:
    """Build a new ACTIVE room with an empty log and zeroed counters.

    Args:
        config: Room limits. Defaults to RoomConfig().
        pid: Creating process id, recorded as provenance.
        user: Creating user name, recorded as provenance.
        host: Creating host name, recorded as provenance.
        now: Creation time in epoch seconds. Defaults to the current time.

    Returns:
        The new room. It is not persisted.
    """
    config = config or RoomConfig()
    ts = now_ts() if now is None else now
    room_id = make_room_id(f"pid:{pid} user:{user} host:{host}", ts)
    logger.debug("Creating room %s", room_id)
    return Room(
        id=room_id,
        created_at=ts,
        last_active=ts,
        state=RoomState.ACTIVE,
        config=config,
        memory=MemoryLog(capacity=config.memory_limit),
        entity_state=EntityState(),
        metadata=RoomMetadata(
            creation_timestamp=ts,
            creator_pid=pid,
            creator_user=user,
            creator_host=host,
        ),
    )


def _transition(room: Room, state: RoomState) -> None:
    previous = room.state
    room.state = state
    room.metadata.state_version += 1
    logger.info(
        "Room %s: %s -> %s (state_version=%d)",
        room.id, previous.value, state.value, room.metadata.state_version,
    )


def suspend(room: Room) -> None:
    """Move a room from any state to SUSPENDED."""
    _transition(room, RoomState.SUSPENDED)


def resume(room: Room) -> None:
    """Move a room from any state to ACTIVE."""
    _transition(room, RoomState.ACTIVE)


def can_enter(room: Room) -> bool:
    """Whether the room accepts input in its current state."""
    return room.state not in UNAVAILABLE_STATES


def ensure_enterable(room: Room) -> None:
    """Raise if the room does not accept input.

    Raises:
        RoomUnavailableError: If the room is SUSPENDED or CORRUPTED.
    """
    if not can_enter(room):
        raise RoomUnavailableError(room.id, room.state.value)
