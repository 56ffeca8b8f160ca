"""Bounded interaction log for rooms."""

from .log import MAX_USAGE, MemoryLog, percent_of
from .models import EntryMetadata, EntryType, MemoryEntry, content_size

__all__ = [
    "EntryMetadata",
    "EntryType",
    "MAX_USAGE",
    "MemoryEntry",
    "MemoryLog",
    "content_size",
    "percent_of",
]
