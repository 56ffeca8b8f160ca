"""Configuration loading.

Configuration is read from the first existing file in an explicit, ordered
list of candidate paths. Nothing here reads the environment; building the
candidate list is the caller's business.

The file is JSON with this structure (every key optional):
```json
{
  "persistence": {"backend": "FILESYSTEM", "path": "./rooms", "compression": "zstd"},
  "limits": {"max_rooms": 1000, "max_room_memory": 536870912,
             "max_input_size": 65536, "entity_timeout": 30},
  "logging": {"level": "INFO", "audit_dir": null},
  "daemon": {"bind": "127.0.0.1:7777", "max_connections": 64}
}
```
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Iterable

from .room.models import (
    DEFAULT_COMPRESSION,
    DEFAULT_MAX_INPUT_SIZE,
    DEFAULT_MEMORY_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

_SIZE_UNITS = {
    "": 1,
    "K": 1024,
    "KB": 1024,
    "M": 1024 * 1024,
    "MB": 1024 * 1024,
    "G": 1024 * 1024 * 1024,
    "GB": 1024 * 1024 * 1024,
}


@dataclass
class PersistenceConfig:
    """Where and how rooms are stored."""

    backend: str = "FILESYSTEM"
    path: str = "./rooms"
    compression: str = DEFAULT_COMPRESSION


@dataclass
class LimitsConfig:
    """Limits applied when creating and using rooms.

    Attributes:
        max_rooms: Maximum number of stored rooms; create refuses beyond it.
        max_room_memory: Default log capacity for new rooms, in bytes.
        max_input_size: Largest accepted input line, in bytes.
        entity_timeout: Advisory timeout recorded on new rooms, in seconds.
    """

    max_rooms: int = 1000
    max_room_memory: int = DEFAULT_MEMORY_LIMIT
    max_input_size: int = DEFAULT_MAX_INPUT_SIZE
    entity_timeout: int = DEFAULT_TIMEOUT_SECONDS


@dataclass
class LoggingConfig:
    """Log level and the optional JSONL audit directory."""

    level: str = "INFO"
    audit_dir: str | None = None


@dataclass
class DaemonConfig:
    """Network listener settings."""

    bind: str = "127.0.0.1:7777"
    max_connections: int = 64

    def address(self) -> tuple[str, int]:
        """Split ``bind`` into host and port.

        Raises:
            ValueError: If bind is not HOST:PORT.
        """
        host, sep, port = self.bind.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"invalid bind address: {self.bind!r}")
        return host, int(port)


@dataclass
class Config:
    """Top-level configuration."""

    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    daemon: DaemonConfig = field(default_factory=DaemonConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_size(text: str) -> int:
    """Parse a byte size such as "4096", "64K" or "512MB".

    Raises:
        ValueError: If the number or unit is not recognised.
    """
    s = text.strip().upper()
    digits = len(s) - len(s.lstrip("0123456789"))
    number, unit = s[:digits], s[digits:].strip()
    if not number:
        raise ValueError(f"invalid size: {text!r}")
    if unit not in _SIZE_UNITS:
        raise ValueError(f"invalid size unit: {unit}")
    return int(number) * _SIZE_UNITS[unit]


def _parse_section(cls: type, data: Any) -> Any:
    """Build a section dataclass, keeping defaults for bad or missing values."""
    section = cls()
    if not isinstance(data, dict):
        return section
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        default = getattr(section, f.name)
        if default is None:
            ok = value is None or isinstance(value, str)
        elif isinstance(default, bool):
            ok = isinstance(value, bool)
        elif isinstance(default, int):
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, type(default))
        if ok:
            setattr(section, f.name, value)
        else:
            logger.warning("Ignoring invalid %s.%s: %r", cls.__name__, f.name, value)
    return section


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse a config dictionary into Config."""
    return Config(
        persistence=_parse_section(PersistenceConfig, data.get("persistence")),
        limits=_parse_section(LimitsConfig, data.get("limits")),
        logging=_parse_section(LoggingConfig, data.get("logging")),
        daemon=_parse_section(DaemonConfig, data.get("daemon")),
    )


def load_config(candidates: Iterable[Path]) -> Config:
    """Load configuration from the first candidate file that exists.

    Args:
        candidates: Paths to try, highest priority first.

    Returns:
        Config parsed from the first existing file, or defaults when no
        candidate exists or the chosen file cannot be read.
    """
    for path in candidates:
        path = Path(path)
        if not path.is_file():
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
            return Config()
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)
            return Config()
        if not isinstance(data, dict):
            logger.warning("Config %s is not a JSON object. Using defaults.", path)
            return Config()
        logger.debug("Loaded config from %s", path)
        return _parse_config(data)

    logger.debug("No config file found, using defaults")
    return Config()


def save_config(config: Config, path: Path) -> None:
    """Write a Config as JSON.

    Args:
        config: The config to save.
        path: File to write. Parent directories are created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise
