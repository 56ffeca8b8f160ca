"""Entity state and the text-command interpreter."""

from .interpreter import (
    ACKNOWLEDGED,
    COUNTER_INITIALIZED,
    COUNTER_RESET,
    NO_SUCH_ENTRY,
    RULES,
    SIZE_EXCEEDED,
    STORED,
    Interpretation,
    RoomView,
    interpret,
    match_rule,
)
from .state import ENTITY_VERSION, EntityState

__all__ = [
    "ACKNOWLEDGED",
    "COUNTER_INITIALIZED",
    "COUNTER_RESET",
    "ENTITY_VERSION",
    "EntityState",
    "Interpretation",
    "NO_SUCH_ENTRY",
    "RULES",
    "RoomView",
    "SIZE_EXCEEDED",
    "STORED",
    "interpret",
    "match_rule",
]
