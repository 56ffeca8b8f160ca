"""Per-room entity state mutated by the interpreter."""

from dataclasses import dataclass, field
from typing import Any

ENTITY_VERSION = "2.1.0"


@dataclass
class EntityState:
    """Key/value memory and named counters held by a room's entity.

    Attributes:
        kv: Remembered values by key.
        counters: Signed integer counters by name.
        version: Informational entity version label.
    """

    kv: dict[str, str] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)
    version: str = ENTITY_VERSION
    extra: dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "EntityState":
        """Return an independent copy."""
        return EntityState(
            kv=dict(self.kv),
            counters=dict(self.counters),
            version=self.version,
            extra=dict(self.extra),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = dict(self.extra)
        data.update({
            "kv": dict(self.kv),
            "counters": dict(self.counters),
            "version": self.version,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityState":
        """Create from dictionary."""
        known = {"kv", "counters", "version"}
        return cls(
            kv={str(k): str(v) for k, v in data.get("kv", {}).items()},
            counters={str(k): int(v) for k, v in data.get("counters", {}).items()},
            version=str(data.get("version", ENTITY_VERSION)),
            extra={k: v for k, v in data.items() if k not in known},
        )
