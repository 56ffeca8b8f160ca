"""Room aggregate, lifecycle and input processing."""

from .lifecycle import (
    UNAVAILABLE_STATES,
    can_enter,
    create_room,
    ensure_enterable,
    make_room_id,
    now_ts,
    resume,
    suspend,
)
from .models import Room, RoomConfig, RoomMetadata, RoomState, RoomSummary
from .processing import process_input

__all__ = [
    "Room",
    "RoomConfig",
    "RoomMetadata",
    "RoomState",
    "RoomSummary",
    "UNAVAILABLE_STATES",
    "can_enter",
    "create_room",
    "ensure_enterable",
    "make_room_id",
    "now_ts",
    "process_input",
    "resume",
    "suspend",
]
