"""Feeding input lines through a room's entity."""

import logging

from ..entity import RoomView, interpret
from ..memory import EntryType, MemoryEntry, content_size, percent_of
from .lifecycle import ensure_enterable
from .models import Room

logger = logging.getLogger(__name__)


def process_input(room: Room, raw: str, now: int) -> str | None:
    """Run one line of input through the room's entity and record it.

    Checks the room accepts input, applies the interpreter, appends its
    entries and an OUTPUT entry for any response, then evicts old entries
    until the log fits its capacity. The room is mutated in place and not
    persisted.

    Args:
        room: The room to interact with.
        raw: The input line as received, without its line terminator.
        now: Epoch seconds used for timestamps.

    Returns:
        The entity's response, or None if it stays silent.

    Raises:
        RoomUnavailableError: If the room is SUSPENDED or CORRUPTED. Nothing
            is modified in that case.
    """
    ensure_enterable(room)

    room.last_active = now
    room.metadata.total_inputs += 1

    # Utilization as it will stand once the INPUT entry is recorded.
    usage = room.memory.usage + content_size(raw)
    view = RoomView(
        max_input_size=room.config.max_input_size,
        utilization=percent_of(usage, room.memory.capacity),
        state=room.state.value,
    )

    result = interpret(room.entity_state, raw, now, view)
    room.entity_state = result.state

    for entry in result.entries:
        room.memory.append(entry)
        if entry.kind is EntryType.ERROR:
            room.metadata.total_errors += 1
            room.metadata.last_error = entry.content

    if result.response is not None:
        room.metadata.total_outputs += 1
        room.memory.append(MemoryEntry(timestamp=now, kind=EntryType.OUTPUT, content=result.response))

    evicted = room.memory.evict_to_fit()
    if evicted:
        logger.debug("Room %s: evicted %d entries", room.id, len(evicted))

    return result.response
