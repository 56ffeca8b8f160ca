"""Room aggregate and its persisted document shape."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..entity import EntityState
from ..memory import MemoryLog

DEFAULT_MEMORY_LIMIT = 512 * 1024 * 1024
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_COMPRESSION = "zstd"
DEFAULT_MAX_INPUT_SIZE = 65536


class RoomState(str, Enum):
    """Lifecycle states of a room.

    Only ACTIVE and SUSPENDED are produced by the lifecycle operations.
    IDLE and CORRUPTED may be written by external tools. TERMINATED is never
    stored: a destroyed room has no record at all.
    """

    ACTIVE = "ACTIVE"
    IDLE = "IDLE"
    SUSPENDED = "SUSPENDED"
    CORRUPTED = "CORRUPTED"
    TERMINATED = "TERMINATED"


def _unknown(data: dict[str, Any], known: set[str]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass
class RoomConfig:
    """Per-room limits fixed at creation time.

    ``compression`` is a label only and ``timeout_seconds`` is advisory.
    """

    memory_limit: int = DEFAULT_MEMORY_LIMIT
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    compression: str = DEFAULT_COMPRESSION
    max_input_size: int = DEFAULT_MAX_INPUT_SIZE
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "memory_limit": self.memory_limit,
            "timeout_seconds": self.timeout_seconds,
            "compression": self.compression,
            "max_input_size": self.max_input_size,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoomConfig":
        return cls(
            memory_limit=int(data["memory_limit"]),
            timeout_seconds=int(data["timeout_seconds"]),
            compression=str(data["compression"]),
            max_input_size=int(data["max_input_size"]),
            extra=_unknown(data, {"memory_limit", "timeout_seconds", "compression", "max_input_size"}),
        )


@dataclass
class RoomMetadata:
    """Creation provenance and running counters.

    ``state_version`` is bumped by lifecycle transitions and never compared.
    """

    creation_timestamp: int
    creator_pid: int = 0
    creator_user: str = "unknown"
    creator_host: str = "unknown"
    total_inputs: int = 0
    total_outputs: int = 0
    total_errors: int = 0
    last_error: str | None = None
    state_version: int = 1
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "creation_timestamp",
        "creator_pid",
        "creator_user",
        "creator_host",
        "total_inputs",
        "total_outputs",
        "total_errors",
        "last_error",
        "state_version",
    )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({name: getattr(self, name) for name in self._FIELDS})
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoomMetadata":
        last_error = data.get("last_error")
        return cls(
            creation_timestamp=int(data["creation_timestamp"]),
            creator_pid=int(data["creator_pid"]),
            creator_user=str(data["creator_user"]),
            creator_host=str(data["creator_host"]),
            total_inputs=int(data["total_inputs"]),
            total_outputs=int(data["total_outputs"]),
            total_errors=int(data["total_errors"]),
            last_error=None if last_error is None else str(last_error),
            state_version=int(data["state_version"]),
            extra=_unknown(data, set(cls._FIELDS)),
        )


@dataclass
class Room:
    """A persisted room: identity, lifecycle state, log and entity state.

    Attributes:
        id: Content-derived identifier, assigned once at creation.
        created_at: Creation time in epoch seconds.
        last_active: Time of the last processed input in epoch seconds.
        state: Current lifecycle state.
        config: Limits fixed at creation.
        memory: The bounded interaction log.
        entity_state: Key/value and counter state.
        metadata: Provenance and counters.
        extra: Unknown top-level fields, preserved across save/load.
    """

    id: str
    created_at: int
    last_active: int
    state: RoomState
    config: RoomConfig
    memory: MemoryLog
    entity_state: EntityState
    metadata: RoomMetadata
    extra: dict[str, Any] = field(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("room id cannot be changed")
        super().__setattr__(name, value)

    def memory_utilization_percent(self) -> int:
        """Memory usage as a whole percentage of capacity."""
        return self.memory.utilization_percent()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document shape."""
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "created_at": self.created_at,
            "last_active": self.last_active,
            "state": self.state.value,
            "config": self.config.to_dict(),
            "memory": self.memory.to_dict(),
            "entity_state": self.entity_state.to_dict(),
            "metadata": self.metadata.to_dict(),
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        """Create from the persisted document shape.

        Raises:
            AttributeError, KeyError, TypeError, ValueError: If the document
                is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError("room document must be an object")
        known = {
            "id", "created_at", "last_active", "state", "config",
            "memory", "entity_state", "metadata",
        }
        return cls(
            id=str(data["id"]),
            created_at=int(data["created_at"]),
            last_active=int(data["last_active"]),
            state=RoomState(data["state"]),
            config=RoomConfig.from_dict(data["config"]),
            memory=MemoryLog.from_dict(data["memory"]),
            entity_state=EntityState.from_dict(data["entity_state"]),
            metadata=RoomMetadata.from_dict(data["metadata"]),
            extra=_unknown(data, known),
        )


@dataclass(frozen=True)
class RoomSummary:
    """Read-only listing projection of a room. Never stored on its own."""

    id: str
    state: RoomState
    created_at: int
    last_active: int
    memory_usage: int
    memory_capacity: int
    total_inputs: int
    total_outputs: int

    @classmethod
    def from_room(cls, room: Room) -> "RoomSummary":
        return cls(
            id=room.id,
            state=room.state,
            created_at=room.created_at,
            last_active=room.last_active,
            memory_usage=room.memory.usage,
            memory_capacity=room.memory.capacity,
            total_inputs=room.metadata.total_inputs,
            total_outputs=room.metadata.total_outputs,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.value,
            "created_at": self.created_at,
            "last_active": self.last_active,
            "memory_usage": self.memory_usage,
            "memory_capacity": self.memory_capacity,
            "total_inputs": self.total_inputs,
            "total_outputs": self.total_outputs,
        }
