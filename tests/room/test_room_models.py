"""Tests for the Room aggregate and its document shape."""

import json

import pytest

from backrooms.memory import EntryType, MemoryEntry
from backrooms.room import Room, RoomConfig, RoomState, RoomSummary, create_room

NOW = 1_700_000_000


@pytest.fixture
def room() -> Room:
    room = create_room(RoomConfig(memory_limit=1024), pid=42, user="ada", host="engine", now=NOW)
    room.memory.append(MemoryEntry(timestamp=NOW, kind=EntryType.INPUT, content="hello"))
    room.entity_state.kv["color"] = "blue"
    room.entity_state.counters["hits"] = 3
    room.metadata.last_error = "ERROR: INPUT_SIZE_EXCEEDED"
    return room


class TestRoomConfig:
    def test_defaults(self):
        config = RoomConfig()
        assert config.memory_limit == 512 * 1024 * 1024
        assert config.timeout_seconds == 30
        assert config.compression == "zstd"
        assert config.max_input_size == 65536


class TestRoom:
    def test_id_is_immutable(self, room: Room):
        with pytest.raises(AttributeError):
            room.id = "other"

    def test_other_fields_are_mutable(self, room: Room):
        room.state = RoomState.IDLE
        assert room.state is RoomState.IDLE

    def test_roundtrip(self, room: Room):
        restored = Room.from_dict(json.loads(json.dumps(room.to_dict())))
        assert restored == room

    def test_document_field_names(self, room: Room):
        data = room.to_dict()
        assert set(data) == {
            "id", "created_at", "last_active", "state", "config",
            "memory", "entity_state", "metadata",
        }
        assert data["state"] == "ACTIVE"
        assert set(data["metadata"]) >= {
            "creator_pid", "creator_user", "creator_host", "total_inputs",
            "total_outputs", "total_errors", "last_error", "state_version",
        }

    def test_unknown_fields_survive_roundtrip(self, room: Room):
        data = room.to_dict()
        data["alias"] = "lobby"
        data["config"]["ttl"] = 5
        data["metadata"]["tags"] = ["x"]

        restored = Room.from_dict(data)

        assert restored.to_dict() == data

    def test_missing_field_rejected(self, room: Room):
        data = room.to_dict()
        del data["memory"]
        with pytest.raises(KeyError):
            Room.from_dict(data)

    def test_bad_state_rejected(self, room: Room):
        data = room.to_dict()
        data["state"] = "HAUNTED"
        with pytest.raises(ValueError):
            Room.from_dict(data)

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            Room.from_dict(["not", "a", "room"])  # type: ignore[arg-type]

    def test_utilization(self, room: Room):
        # 5 bytes of 1024
        assert room.memory_utilization_percent() == 0
        room.memory.append(MemoryEntry(timestamp=NOW, kind=EntryType.OUTPUT, content="x" * 507))
        assert room.memory_utilization_percent() == 50


class TestRoomSummary:
    def test_from_room(self, room: Room):
        room.metadata.total_inputs = 4
        room.metadata.total_outputs = 2
        summary = RoomSummary.from_room(room)
        assert summary == RoomSummary(
            id=room.id,
            state=RoomState.ACTIVE,
            created_at=NOW,
            last_active=NOW,
            memory_usage=5,
            memory_capacity=1024,
            total_inputs=4,
            total_outputs=2,
        )

    def test_to_dict(self, room: Room):
        data = RoomSummary.from_room(room).to_dict()
        assert data["state"] == "ACTIVE"
        assert data["memory_usage"] == 5
