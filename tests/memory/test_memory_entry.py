"""Tests for MemoryEntry."""

import pytest

from backrooms.memory import EntryType, MemoryEntry, content_size


class TestMemoryEntry:
    """Tests for the MemoryEntry dataclass."""

    def test_default_metadata(self):
        e = MemoryEntry(timestamp=1, kind=EntryType.INPUT, content="hi")
        assert e.metadata == {}

    def test_immutable(self):
        e = MemoryEntry(timestamp=1, kind=EntryType.INPUT, content="hi")
        with pytest.raises(AttributeError):
            e.content = "changed"  # type: ignore[misc]

    def test_size_is_utf8_length(self):
        e = MemoryEntry(timestamp=1, kind=EntryType.OUTPUT, content="日本")
        assert e.size == 6
        assert content_size("abc") == 3

    def test_kind_serializes_as_name(self):
        e = MemoryEntry(timestamp=1, kind=EntryType.STATE_CHANGE, content="x")
        assert e.to_dict()["kind"] == "STATE_CHANGE"

    def test_roundtrip_with_nested_metadata(self):
        e = MemoryEntry(
            timestamp=9,
            kind=EntryType.OBSERVATION,
            content="seen",
            metadata={"tags": ["a", "b"], "score": 1.5, "nested": {"ok": True}},
        )
        assert MemoryEntry.from_dict(e.to_dict()) == e

    def test_null_metadata_reads_as_empty(self):
        e = MemoryEntry.from_dict({"timestamp": 1, "kind": "INPUT", "content": "x", "metadata": None})
        assert e.metadata == {}

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            MemoryEntry.from_dict({"timestamp": 1, "kind": "DREAM", "content": "x"})

    def test_unknown_fields_preserved(self):
        data = {"timestamp": 1, "kind": "INPUT", "content": "x", "metadata": {}, "source": "tty"}
        assert MemoryEntry.from_dict(data).to_dict() == data
