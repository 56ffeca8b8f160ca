"""Tests for the bounded memory log."""

import pytest

from backrooms.memory import MAX_USAGE, EntryType, MemoryEntry, MemoryLog, percent_of


def entry(content: str, timestamp: int = 0, kind: EntryType = EntryType.INPUT) -> MemoryEntry:
    return MemoryEntry(timestamp=timestamp, kind=kind, content=content)


class TestAppend:
    """Tests for MemoryLog.append."""

    def test_append_tracks_usage(self):
        log = MemoryLog(capacity=100)
        log.append(entry("abcd"))
        log.append(entry("ef"))
        assert log.usage == 6
        assert [e.content for e in log.entries] == ["abcd", "ef"]

    def test_usage_counts_utf8_bytes(self):
        """Multi-byte characters count by their encoded size."""
        log = MemoryLog(capacity=100)
        log.append(entry("é"))
        assert log.usage == 2

    def test_append_never_refuses(self):
        """An oversized append is accepted until eviction runs."""
        log = MemoryLog(capacity=3)
        log.append(entry("too long"))
        assert log.usage == 8
        assert len(log) == 1

    def test_usage_saturates(self):
        log = MemoryLog(capacity=10, usage=MAX_USAGE - 1)
        log.append(entry("abc"))
        assert log.usage == MAX_USAGE


class TestEvictToFit:
    """Tests for FIFO eviction."""

    def test_evicts_oldest_first(self):
        """Capacity 10 with three 4-byte entries keeps the newest two."""
        log = MemoryLog(capacity=10)
        for content in ("aaaa", "bbbb", "cccc"):
            log.append(entry(content))

        evicted = log.evict_to_fit()

        assert [e.content for e in evicted] == ["aaaa"]
        assert [e.content for e in log.entries] == ["bbbb", "cccc"]
        assert log.usage == 8

    def test_no_eviction_when_within_capacity(self):
        log = MemoryLog(capacity=10)
        log.append(entry("0123456789"))
        assert log.evict_to_fit() == []
        assert log.usage == 10

    def test_single_oversized_entry_is_evicted(self):
        """An entry larger than the capacity on its own empties the log."""
        log = MemoryLog(capacity=3)
        log.append(entry("oversized"))
        log.evict_to_fit()
        assert log.entries == []
        assert log.usage == 0

    def test_oversized_newest_entry_clears_everything(self):
        log = MemoryLog(capacity=5)
        log.append(entry("ab"))
        log.append(entry("abcdefgh"))
        log.evict_to_fit()
        assert log.entries == []
        assert log.usage == 0

    def test_eviction_ignores_timestamps(self):
        """Append order, not timestamp, decides what is evicted."""
        log = MemoryLog(capacity=4)
        log.append(entry("old", timestamp=200))
        log.append(entry("new", timestamp=100))
        log.evict_to_fit()
        assert [e.content for e in log.entries] == ["new"]

    @pytest.mark.parametrize(
        "capacity,sizes",
        [
            (0, [1, 2, 3]),
            (5, [5, 5, 5]),
            (7, [3, 9, 1, 1, 2]),
            (100, [40, 40, 40, 1]),
            (1, [0, 0, 2]),
        ],
    )
    def test_fits_or_empty_and_keeps_order(self, capacity: int, sizes: list[int]):
        log = MemoryLog(capacity=capacity)
        for i, size in enumerate(sizes):
            log.append(MemoryEntry(timestamp=i, kind=EntryType.INPUT, content="x" * size))
            log.evict_to_fit()
            assert log.usage <= capacity or not log.entries
            assert log.usage == sum(e.size for e in log.entries)
            stamps = [e.timestamp for e in log.entries]
            assert stamps == sorted(stamps)
            # Retained entries are always a suffix of what was appended.
            assert stamps == list(range(i + 1 - len(stamps), i + 1))


class TestUtilization:
    """Tests for utilization percentages."""

    def test_zero_capacity(self):
        assert MemoryLog(capacity=0).utilization_percent() == 0

    def test_rounds_half_up(self):
        assert percent_of(1, 200) == 1
        assert percent_of(1, 3) == 33
        assert percent_of(2, 3) == 67

    def test_full(self):
        log = MemoryLog(capacity=4)
        log.append(entry("abcd"))
        assert log.utilization_percent() == 100


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_roundtrip(self):
        log = MemoryLog(capacity=50)
        log.append(entry("hello", timestamp=1))
        log.append(MemoryEntry(timestamp=2, kind=EntryType.ERROR, content="oops", metadata={"max": 3}))

        restored = MemoryLog.from_dict(log.to_dict())

        assert restored == log

    def test_mismatched_usage_is_rejected(self):
        data = MemoryLog(capacity=50).to_dict()
        data["usage"] = 12
        with pytest.raises(ValueError, match="does not match"):
            MemoryLog.from_dict(data)

    def test_unknown_fields_preserved(self):
        data = MemoryLog(capacity=50).to_dict()
        data["compression_state"] = {"algo": "zstd"}
        restored = MemoryLog.from_dict(data)
        assert restored.to_dict()["compression_state"] == {"algo": "zstd"}
