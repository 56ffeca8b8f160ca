"""JSONL audit log of room events."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class AuditEntry:
    """A single audit record."""

    timestamp: str
    event: str
    room_id: str | None = None
    state: str | None = None
    state_version: int | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        extra = data.pop("extra")
        data = {k: v for k, v in data.items() if v is not None}
        data.update(extra)
        return data


class JSONLLogger:
    """Appends room events to a JSONL file, rotating it by size."""

    def __init__(
        self,
        log_dir: str | Path,
        filename: str = "audit.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: AuditEntry) -> None:
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log(
        self,
        event: str,
        *,
        room_id: str | None = None,
        state: str | None = None,
        state_version: int | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        self._write(AuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            room_id=room_id,
            state=state,
            state_version=state_version,
            error=error,
            extra=extra,
        ))

    def log_state_change(self, room_id: str, state: str, state_version: int) -> None:
        """Log a lifecycle transition."""
        self.log("state_change", room_id=room_id, state=state, state_version=state_version)

    def log_input(self, room_id: str, input_size: int, responded: bool, usage: int) -> None:
        """Log one processed input line."""
        self.log(
            "input_processed",
            room_id=room_id,
            input_size=input_size,
            responded=responded,
            memory_usage=usage,
        )


class NullLogger(JSONLLogger):
    """Audit logger that discards everything."""

    def __init__(self) -> None:
        pass

    def _write(self, entry: AuditEntry) -> None:
        pass


def open_audit_log(audit_dir: str | Path | None) -> JSONLLogger:
    """Audit logger writing to ``audit_dir``, or a no-op logger if unset."""
    if audit_dir is None:
        return NullLogger()
    return JSONLLogger(Path(audit_dir).expanduser())
