"""Data models for the interaction log."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Structured, JSON-compatible payload carried alongside an entry.
EntryMetadata = dict[str, Any]


class EntryType(str, Enum):
    """Kind of record stored in a room's log."""

    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    OBSERVATION = "OBSERVATION"
    STATE_CHANGE = "STATE_CHANGE"
    ERROR = "ERROR"


def content_size(content: str) -> int:
    """Size of an entry's content in bytes (UTF-8)."""
    return len(content.encode("utf-8"))


@dataclass(frozen=True)
class MemoryEntry:
    """A single record in a room's log.

    Attributes:
        timestamp: Caller-supplied epoch seconds. Not used for ordering.
        kind: What produced the entry.
        content: Raw text. Its byte length counts against the log capacity.
        metadata: Optional structured payload, never interpreted by the core.
        extra: Unknown fields read from a newer document, kept for round-trips.
    """

    timestamp: int
    kind: EntryType
    content: str
    metadata: EntryMetadata = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return content_size(self.content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = dict(self.extra)
        data.update({
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "content": self.content,
            "metadata": self.metadata,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryEntry":
        """Create from dictionary."""
        known = {"timestamp", "kind", "content", "metadata"}
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError("entry metadata must be an object")
        return cls(
            timestamp=int(data["timestamp"]),
            kind=EntryType(data["kind"]),
            content=str(data["content"]),
            metadata=metadata,
            extra={k: v for k, v in data.items() if k not in known},
        )
