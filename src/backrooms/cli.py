"""Command-line driver for the room system.

Every subcommand is a ``cmd_*`` function taking the parsed arguments and a
Workspace, and returning an exit code.
"""

import argparse
import getpass
import json
import logging
import os
import socket
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from . import __version__
from .config import Config, load_config, parse_size, save_config
from .errors import BackroomsError
from .logging import JSONLLogger, open_audit_log
from .persistence import PersistenceBackend, open_backend
from .room import (
    Room,
    RoomConfig,
    RoomState,
    create_room,
    ensure_enterable,
    now_ts,
    process_input,
    resume,
    suspend,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BACKROOMS_CONFIG"
EXIT_WORDS = ("exit", "quit")
LAST_ROOM_PLACEHOLDER = "{LAST_ROOM_ID}"


def default_config_candidates(explicit: Path | None = None) -> list[Path]:
    """Config files to try, highest priority first."""
    candidates: list[Path] = []
    if explicit is not None:
        candidates.append(explicit)
    if os.getenv(CONFIG_ENV_VAR):
        candidates.append(Path(os.environ[CONFIG_ENV_VAR]))
    candidates.append(Path("/etc/backrooms/config.json"))
    candidates.append(Path.home() / ".config" / "backrooms" / "config.json")
    candidates.append(Path("config") / "default.json")
    return candidates


@dataclass
class Workspace:
    """Everything a subcommand needs: config, storage and audit log."""

    config: Config
    backend: PersistenceBackend
    audit: JSONLLogger
    persist: bool = True

    def save(self, room: Room) -> None:
        """Persist a room unless writes are disabled for this invocation."""
        if self.persist:
            self.backend.save_room(room)


def _identity() -> tuple[int, str, str]:
    """Process id, user and host recorded on new rooms."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return os.getpid(), user, socket.gethostname() or "unknown"


def _new_room(ws: Workspace, room_config: RoomConfig) -> Room:
    limit = ws.config.limits.max_rooms
    if len(ws.backend.list_rooms()) >= limit:
        raise BackroomsError(f"room limit reached ({limit})", operation="create")
    pid, user, host = _identity()
    room = create_room(room_config, pid=pid, user=user, host=host)
    ws.save(room)
    ws.audit.log("room_created", room_id=room.id, state=room.state.value, memory_limit=room_config.memory_limit)
    return room


def _interact(ws: Workspace, room: Room, line: str, out: TextIO) -> None:
    """Process one input line, write any response and persist the room."""
    response = process_input(room, line, now_ts())
    if response is not None:
        out.write(response + "\n")
        out.flush()
    ws.audit.log_input(room.id, len(line.encode("utf-8")), response is not None, room.memory.usage)
    ws.save(room)


def cmd_init(args: argparse.Namespace, ws: Workspace) -> int:
    """Prepare storage and report existing rooms."""
    print("INITIALIZING ROOM SYSTEM")
    print(f"PERSISTENCE BACKEND: {ws.config.persistence.backend.upper()}")
    print(f"PATH: {ws.config.persistence.path}")
    rooms = ws.backend.list_rooms()
    print(f"SCANNING EXISTING ROOMS: {len(rooms)} FOUND")
    if args.write_config:
        save_config(ws.config, args.write_config)
        print(f"CONFIG WRITTEN: {args.write_config}")
    print("READY")
    return 0


def cmd_create(args: argparse.Namespace, ws: Workspace) -> int:
    """Create a new room."""
    limits = ws.config.limits
    try:
        memory_limit = parse_size(args.memory_limit) if args.memory_limit else limits.max_room_memory
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    room_config = RoomConfig(
        memory_limit=memory_limit,
        timeout_seconds=args.timeout if args.timeout is not None else limits.entity_timeout,
        compression=args.compression or ws.config.persistence.compression,
        max_input_size=limits.max_input_size,
    )
    room = _new_room(ws, room_config)

    print(f"ROOM CREATED: {room.id}")
    if args.name:
        print(f"ALIAS: {args.name}")
    print(
        f"CONFIG: memory_limit={room_config.memory_limit} "
        f"timeout={room_config.timeout_seconds} compression={room_config.compression}"
    )
    print(f"STATE: {room.state.value}")
    print("ENTITY: INITIALIZED")
    return 0


def cmd_enter(args: argparse.Namespace, ws: Workspace) -> int:
    """Interactive session: read lines from stdin until exit or EOF."""
    room = ws.backend.load_room(args.room_id)
    ensure_enterable(room)
    if args.readonly:
        ws.persist = False

    print("ENTERING ROOM")
    ws.audit.log("room_entered", room_id=room.id, state=room.state.value)

    out: TextIO = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    try:
        while True:
            sys.stdout.write("> ")
            sys.stdout.flush()
            buf = sys.stdin.readline()
            if not buf:
                break
            line = buf.rstrip("\r\n")
            if line in EXIT_WORDS:
                break
            _interact(ws, room, line, out)
    finally:
        if out is not sys.stdout:
            out.close()

    print("EXITING ROOM")
    return 0


def cmd_list(args: argparse.Namespace, ws: Workspace) -> int:
    """List stored rooms."""
    rooms = ws.backend.list_rooms()
    if args.state:
        rooms = [r for r in rooms if r.state.value == args.state.upper()]
    if args.limit is not None:
        rooms = rooms[: args.limit]

    if args.format == "json":
        print(json.dumps([r.to_dict() for r in rooms], indent=2))
        return 0

    print("ROOMS:")
    for r in rooms:
        print(
            f"{r.id} {r.state.value} created_at={r.created_at} "
            f"last_active={r.last_active} mem={r.memory_usage} / {r.memory_capacity}"
        )
    return 0


def cmd_inspect(args: argparse.Namespace, ws: Workspace) -> int:
    """Show a room's details."""
    room = ws.backend.load_room(args.room_id)
    if args.format == "json":
        print(json.dumps(room.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print("ROOM INSPECTION")
    print(f"ID: {room.id}")
    print(f"STATE: {room.state.value}")
    print(f"CREATED: {room.created_at}")
    print(f"LAST_ACTIVE: {room.last_active}")
    print(f"MEMORY: {room.memory.usage} / {room.memory.capacity}")
    print(f"INPUTS: {room.metadata.total_inputs}")
    print(f"OUTPUTS: {room.metadata.total_outputs}")
    return 0


def _transition(ws: Workspace, room_id: str, target: RoomState) -> int:
    room = ws.backend.load_room(room_id)
    if target is RoomState.SUSPENDED:
        suspend(room)
    else:
        resume(room)
    ws.save(room)
    ws.audit.log_state_change(room.id, room.state.value, room.metadata.state_version)
    print(f"STATE: {room.state.value}")
    return 0


def cmd_suspend(args: argparse.Namespace, ws: Workspace) -> int:
    """Suspend a room."""
    return _transition(ws, args.room_id, RoomState.SUSPENDED)


def cmd_resume(args: argparse.Namespace, ws: Workspace) -> int:
    """Resume a room."""
    return _transition(ws, args.room_id, RoomState.ACTIVE)


def cmd_destroy(args: argparse.Namespace, ws: Workspace) -> int:
    """Delete a room's stored record."""
    if not args.confirm:
        print("Error: refusing to destroy without --confirm")
        return 1
    if not ws.persist:
        print(f"NO-PERSIST: room {args.room_id} left in storage")
        return 0
    ws.backend.delete_room(args.room_id)
    ws.audit.log("room_destroyed", room_id=args.room_id, state=RoomState.TERMINATED.value)
    print("ROOM TERMINATED")
    return 0


def cmd_export(args: argparse.Namespace, ws: Workspace) -> int:
    """Write a room's log entries to a file."""
    room = ws.backend.load_room(args.room_id)
    entries = [e.to_dict() for e in room.memory.entries]
    output = Path(args.output)
    if args.format == "json":
        output.write_text(json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        with open(output, "w", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    print(f"EXPORTED: {output}")
    return 0


def cmd_stats(args: argparse.Namespace, ws: Workspace) -> int:
    """Show a room's counters."""
    room = ws.backend.load_room(args.room_id)
    print("ROOM STATISTICS")
    print(f"ID: {room.id}")
    print(f"STATE: {room.state.value}")
    print(f"CREATED: {room.created_at}")
    print(f"LAST_ACTIVE: {room.last_active}")
    print(f"MEMORY_USAGE: {room.memory.usage} bytes")
    print(f"MEMORY_CAPACITY: {room.memory.capacity} bytes")
    print(f"ENTRIES: {len(room.memory)}")
    print(f"TOTAL_INPUTS: {room.metadata.total_inputs}")
    print(f"TOTAL_OUTPUTS: {room.metadata.total_outputs}")
    print(f"TOTAL_ERRORS: {room.metadata.total_errors}")
    return 0


def cmd_compare(args: argparse.Namespace, ws: Workspace) -> int:
    """Compare two rooms side by side."""
    a = ws.backend.load_room(args.id1)
    b = ws.backend.load_room(args.id2)
    print("COMPARING ROOMS")
    print(f"ROOM A: {a.id} {a.state.value}")
    print(f"ROOM B: {b.id} {b.state.value}")
    print(f"MEMORY A: {len(a.memory)} entries {a.memory.usage} bytes")
    print(f"MEMORY B: {len(b.memory)} entries {b.memory.usage} bytes")
    print("NO SHARED MEMORY DETECTED")
    return 0


def cmd_batch(args: argparse.Namespace, ws: Workspace) -> int:
    """Run a script of create/enter/exit lines and entity input."""
    if args.file:
        script = Path(args.file).read_text(encoding="utf-8")
    else:
        script = sys.stdin.read()

    last_room: str | None = None
    current: Room | None = None
    for raw in script.splitlines():
        line = raw.strip()
        if not line:
            continue

        if current is not None:
            if line in EXIT_WORDS:
                print("EXITING ROOM")
                current = None
            else:
                _interact(ws, current, line, sys.stdout)
            continue

        if line == "create":
            room = _new_room(ws, RoomConfig(
                memory_limit=ws.config.limits.max_room_memory,
                timeout_seconds=ws.config.limits.entity_timeout,
                compression=ws.config.persistence.compression,
                max_input_size=ws.config.limits.max_input_size,
            ))
            print(f"ROOM CREATED: {room.id}")
            last_room = room.id
            continue

        if line.startswith("enter"):
            parts = line.split()
            if len(parts) != 2:
                print(f"Error: invalid enter syntax: {line}")
                return 1
            room_id = parts[1]
            if room_id == LAST_ROOM_PLACEHOLDER:
                if last_room is None:
                    print("Error: no room created yet")
                    return 1
                room_id = last_room
            current = ws.backend.load_room(room_id)
            ensure_enterable(current)
            print("ENTERING ROOM")
            continue

        print(f"IGNORED: {line}")

    print("BATCH COMPLETE")
    return 0


def cmd_daemon(args: argparse.Namespace, ws: Workspace) -> int:
    """Run the network listener."""
    from .daemon import run

    run(ws.config)
    return 0


def cmd_connect(args: argparse.Namespace, ws: Workspace) -> int:
    """Talk to a running listener from the terminal."""
    from .daemon import connect

    connect(ws.config)
    return 0


def cmd_version(args: argparse.Namespace, ws: Workspace | None = None) -> int:
    """Print the version."""
    print(f"room version {__version__}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the room CLI."""
    parser = argparse.ArgumentParser(prog="room", description="Backrooms Terminal")
    parser.add_argument("--config", type=Path, help="Path to a JSON config file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-persist", action="store_true", help="Never write to storage")

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    init_parser = subparsers.add_parser("init", help="Prepare storage")
    init_parser.add_argument("--write-config", type=Path, help="Also write the effective config here")

    create_cmd = subparsers.add_parser("create", help="Create a room")
    create_cmd.add_argument("--memory-limit", help="Log capacity, e.g. 64K or 512M")
    create_cmd.add_argument("--timeout", type=int, help="Advisory timeout in seconds")
    create_cmd.add_argument("--compression", help="Compression label")
    create_cmd.add_argument("--name", help="Alias shown after creation")

    enter_parser = subparsers.add_parser("enter", help="Interact with a room")
    enter_parser.add_argument("room_id")
    enter_parser.add_argument("--output", type=Path, help="Write responses to this file")
    enter_parser.add_argument("--readonly", action="store_true", help="Do not save changes")

    list_parser = subparsers.add_parser("list", help="List rooms")
    list_parser.add_argument("--state", help="Only rooms in this state")
    list_parser.add_argument("--limit", type=int, help="Show at most this many rooms")
    list_parser.add_argument("--format", choices=["text", "json"], default="text")

    inspect_parser = subparsers.add_parser("inspect", help="Show a room")
    inspect_parser.add_argument("room_id")
    inspect_parser.add_argument("--format", choices=["text", "json"], default="text")

    for name, help_text in (("suspend", "Suspend a room"), ("resume", "Resume a room"), ("stats", "Room statistics")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("room_id")

    destroy_parser = subparsers.add_parser("destroy", help="Delete a room")
    destroy_parser.add_argument("room_id")
    destroy_parser.add_argument("--confirm", action="store_true", help="Required to delete")

    export_parser = subparsers.add_parser("export", help="Export a room's log")
    export_parser.add_argument("room_id")
    export_parser.add_argument("--output", type=Path, required=True)
    export_parser.add_argument("--format", choices=["jsonl", "json"], default="jsonl")

    compare_parser = subparsers.add_parser("compare", help="Compare two rooms")
    compare_parser.add_argument("id1")
    compare_parser.add_argument("id2")

    batch_parser = subparsers.add_parser("batch", help="Run a batch script")
    batch_parser.add_argument("--file", type=Path, help="Script file (default: stdin)")

    subparsers.add_parser("daemon", help="Run the network listener")
    subparsers.add_parser("connect", help="Connect to a running listener")
    subparsers.add_parser("version", help="Show version")

    return parser


COMMANDS = {
    "init": cmd_init,
    "create": cmd_create,
    "enter": cmd_enter,
    "list": cmd_list,
    "inspect": cmd_inspect,
    "suspend": cmd_suspend,
    "resume": cmd_resume,
    "destroy": cmd_destroy,
    "export": cmd_export,
    "stats": cmd_stats,
    "compare": cmd_compare,
    "batch": cmd_batch,
    "daemon": cmd_daemon,
    "connect": cmd_connect,
    "version": cmd_version,
}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def open_workspace(config: Config, persist: bool = True) -> Workspace:
    """Open and initialize the configured backend.

    Raises:
        BackendUnsupportedError: If the configured backend is not implemented.
    """
    backend = open_backend(config.persistence.backend, Path(config.persistence.path).expanduser())
    backend.init()
    return Workspace(
        config=config,
        backend=backend,
        audit=open_audit_log(config.logging.audit_dir),
        persist=persist,
    )


def run_cli(argv: list[str] | None = None) -> int:
    """Run the room CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    config = load_config(default_config_candidates(args.config))
    _setup_logging("DEBUG" if args.verbose else config.logging.level)

    if args.command == "version":
        return cmd_version(args)

    try:
        ws = open_workspace(config, persist=not args.no_persist)
        return handler(args, ws)
    except (BackroomsError, OSError) as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1
