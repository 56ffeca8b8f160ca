"""Deterministic text-command interpreter for room entities.

Input is matched against an ordered table of rules; the first rule whose
predicate accepts the trimmed input handles it. The interpreter never touches
a room directly. It works on a copy of the entity state and returns the new
state together with the log entries to record, so it can be exercised without
any storage.
"""

import string
from dataclasses import dataclass, field
from typing import Callable

from ..memory import EntryType, MemoryEntry, content_size
from .state import EntityState

SIZE_EXCEEDED = "ERROR: INPUT_SIZE_EXCEEDED"
STORED = "ENTITY: Stored."
NO_SUCH_ENTRY = "ENTITY: No such entry."
COUNTER_INITIALIZED = "ENTITY: Counter initialized."
COUNTER_RESET = "ENTITY: Counter reset to 0."
ACKNOWLEDGED = "ENTITY: Acknowledged."

STATUS_COMMANDS = frozenset({"system status", "status", "system check"})

_NOISE_CHARS = frozenset(string.punctuation + string.digits)


@dataclass(frozen=True)
class RoomView:
    """Read-only facts about the room that some rules report on.

    Attributes:
        max_input_size: Largest accepted input, in bytes.
        utilization: Memory usage as a whole percentage of capacity.
        state: Name of the room's lifecycle state.
    """

    max_input_size: int
    utilization: int = 0
    state: str = "ACTIVE"


@dataclass
class Interpretation:
    """Outcome of interpreting one line of input.

    Attributes:
        response: Text to show the user, or None for silence.
        state: Entity state after the input was applied.
        entries: Log entries to record, starting with the INPUT entry.
    """

    response: str | None
    state: EntityState
    entries: list[MemoryEntry] = field(default_factory=list)


@dataclass
class _Request:
    raw: str
    text: str
    now: int
    view: RoomView
    state: EntityState
    entries: list[MemoryEntry]


Predicate = Callable[[_Request], bool]
Handler = Callable[[_Request], str | None]


def _argument(text: str, prefix: str) -> str:
    return text[len(prefix):].strip()


def _is_empty(req: _Request) -> bool:
    return not req.text


def _silence(req: _Request) -> str | None:
    return None


def _is_oversized(req: _Request) -> bool:
    return content_size(req.raw) > req.view.max_input_size


def _refuse_oversized(req: _Request) -> str:
    req.entries.append(MemoryEntry(
        timestamp=req.now,
        kind=EntryType.ERROR,
        content=SIZE_EXCEEDED,
        metadata={"max": req.view.max_input_size},
    ))
    return SIZE_EXCEEDED


def _is_remember(req: _Request) -> bool:
    return req.text.startswith("remember ") and ":" in req.text


def _remember(req: _Request) -> str:
    key, _, value = _argument(req.text, "remember ").partition(":")
    req.state.kv[key.strip()] = value.strip()
    return STORED


def _recall(req: _Request) -> str:
    value = req.state.kv.get(_argument(req.text, "recall "))
    if value is None:
        return NO_SUCH_ENTRY
    return f"ENTITY: {value}"


def _initialize_counter(req: _Request) -> str:
    req.state.counters[_argument(req.text, "initialize counter ")] = 0
    return COUNTER_INITIALIZED


def _increment_counter(req: _Request) -> str:
    name = _argument(req.text, "increment counter ")
    value = req.state.counters.get(name, 0) + 1
    req.state.counters[name] = value
    return f"ENTITY: Counter: {value}"


def _reset_counter(req: _Request) -> str:
    req.state.counters[_argument(req.text, "reset counter ")] = 0
    return COUNTER_RESET


def _is_status(req: _Request) -> bool:
    return req.text.lower() in STATUS_COMMANDS


def _status(req: _Request) -> str:
    return f"ENTITY: Operational. Memory usage {req.view.utilization}%. State: {req.view.state}."


def _is_noise(req: _Request) -> bool:
    return len(req.text) < 6 and all(c in _NOISE_CHARS for c in req.text)


def _prefix(prefix: str) -> Predicate:
    return lambda req: req.text.startswith(prefix)


def _always(req: _Request) -> bool:
    return True


# Evaluated top to bottom; the first matching predicate wins.
RULES: list[tuple[str, Predicate, Handler]] = [
    ("empty", _is_empty, _silence),
    ("size_exceeded", _is_oversized, _refuse_oversized),
    ("remember", _is_remember, _remember),
    ("recall", _prefix("recall "), _recall),
    ("initialize_counter", _prefix("initialize counter "), _initialize_counter),
    ("increment_counter", _prefix("increment counter "), _increment_counter),
    ("reset_counter", _prefix("reset counter "), _reset_counter),
    ("status", _is_status, _status),
    ("noise", _is_noise, _silence),
    ("acknowledge", _always, lambda req: ACKNOWLEDGED),
]


def match_rule(text: str, view: RoomView) -> str:
    """Name of the rule that would handle ``text``.

    Args:
        text: Raw input line.
        view: Room facts used by the size rule.

    Returns:
        The rule name from RULES.
    """
    req = _Request(raw=text, text=text.strip(), now=0, view=view, state=EntityState(), entries=[])
    for name, predicate, _ in RULES:
        if predicate(req):
            return name
    raise AssertionError("rule table has no fallback")


def interpret(state: EntityState, raw: str, now: int, view: RoomView) -> Interpretation:
    """Apply one line of input to an entity state.

    The input state is not modified. An INPUT entry for ``raw`` is always the
    first returned entry. Appending an OUTPUT entry for the response is up to
    the caller.

    Args:
        state: Current entity state.
        raw: The input line exactly as received.
        now: Epoch seconds stamped on produced entries.
        view: Room facts needed by the size and status rules.

    Returns:
        The response, new state and entries to record.
    """
    req = _Request(
        raw=raw,
        text=raw.strip(),
        now=now,
        view=view,
        state=state.copy(),
        entries=[MemoryEntry(timestamp=now, kind=EntryType.INPUT, content=raw)],
    )
    response = None
    for _, predicate, handler in RULES:
        if predicate(req):
            response = handler(req)
            break
    return Interpretation(response=response, state=req.state, entries=req.entries)
