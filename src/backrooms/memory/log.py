"""Bounded, append-only interaction log with FIFO eviction."""

from dataclasses import dataclass, field
from typing import Any

from .models import MemoryEntry

# Usage saturates here instead of growing without bound.
MAX_USAGE = 2**64 - 1


def percent_of(usage: int, capacity: int) -> int:
    """Whole percentage of capacity, rounded half up. 0 for zero capacity."""
    if capacity == 0:
        return 0
    return (usage * 200 + capacity) // (capacity * 2)


@dataclass
class MemoryLog:
    """Ordered log of entries bounded by the total byte size of their content.

    ``usage`` is kept in step with ``entries`` on every append and eviction;
    it is never recomputed. Appends are never refused: the log may exceed its
    capacity until ``evict_to_fit`` runs.
    """

    capacity: int
    entries: list[MemoryEntry] = field(default_factory=list)
    usage: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def append(self, entry: MemoryEntry) -> None:
        """Add an entry at the end of the log."""
        self.usage = min(self.usage + entry.size, MAX_USAGE)
        self.entries.append(entry)

    def evict_to_fit(self) -> list[MemoryEntry]:
        """Drop the oldest entries until usage fits the capacity.

        Returns:
            The evicted entries, oldest first.
        """
        evicted: list[MemoryEntry] = []
        while self.usage > self.capacity and self.entries:
            removed = self.entries.pop(0)
            self.usage = max(self.usage - removed.size, 0)
            evicted.append(removed)
        return evicted

    def utilization_percent(self) -> int:
        """Usage as a whole percentage of capacity."""
        return percent_of(self.usage, self.capacity)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = dict(self.extra)
        data.update({
            "entries": [e.to_dict() for e in self.entries],
            "capacity": self.capacity,
            "usage": self.usage,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryLog":
        """Create from dictionary.

        Raises:
            ValueError: If the stored usage does not match the stored entries.
        """
        known = {"entries", "capacity", "usage"}
        entries = [MemoryEntry.from_dict(e) for e in data.get("entries", [])]
        usage = int(data["usage"])
        expected = min(sum(e.size for e in entries), MAX_USAGE)
        if usage != expected:
            raise ValueError(f"memory usage {usage} does not match retained entries ({expected})")
        return cls(
            capacity=int(data["capacity"]),
            entries=entries,
            usage=usage,
            extra={k: v for k, v in data.items() if k not in known},
        )
