"""SQLite storage for room documents."""

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from ..errors import RoomNotFoundError, StorageIOError
from ..room import Room, RoomSummary
from .base import PersistenceBackend, decode_room, encode_room

logger = logging.getLogger(__name__)


class SqliteBackend(PersistenceBackend):
    """Stores each room as one row of a ``rooms`` table.

    The full document lives in ``room_json``. The ``state``, ``created_at``
    and ``last_active`` columns are copies kept for indexed queries.
    A fresh connection is opened per call, so one backend can be shared
    across threads.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the backend with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        """Open a new connection to the database."""
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def init(self) -> None:
        """Create the rooms table if it doesn't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._connect()) as conn, conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS rooms (
                        id          TEXT PRIMARY KEY,
                        state       TEXT NOT NULL,
                        created_at  INTEGER NOT NULL,
                        last_active INTEGER NOT NULL,
                        room_json   TEXT NOT NULL
                    )
                """)
                conn.execute("CREATE INDEX IF NOT EXISTS idx_rooms_state ON rooms(state)")
        except (OSError, sqlite3.Error) as e:
            raise StorageIOError("init", e) from e

    def list_rooms(self) -> list[RoomSummary]:
        self.init()
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute("SELECT id, room_json FROM rooms").fetchall()
        except sqlite3.Error as e:
            raise StorageIOError("list_rooms", e) from e
        return self._summaries([(row["id"], row["room_json"]) for row in rows])

    def load_room(self, room_id: str) -> Room:
        self.init()
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT room_json FROM rooms WHERE id = ?", (room_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageIOError("load_room", e, room_id) from e
        if row is None:
            raise RoomNotFoundError(room_id)
        return decode_room(row["room_json"], room_id)

    def save_room(self, room: Room) -> None:
        self.init()
        raw = encode_room(room)
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO rooms (id, state, created_at, last_active, room_json)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        state = excluded.state,
                        created_at = excluded.created_at,
                        last_active = excluded.last_active,
                        room_json = excluded.room_json
                    """,
                    (room.id, room.state.value, room.created_at, room.last_active, raw),
                )
        except sqlite3.Error as e:
            raise StorageIOError("save_room", e, room.id) from e
        logger.debug("Saved room %s to %s", room.id, self.db_path)

    def delete_room(self, room_id: str) -> None:
        self.init()
        try:
            with closing(self._connect()) as conn, conn:
                cursor = conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,))
        except sqlite3.Error as e:
            raise StorageIOError("delete_room", e, room_id) from e
        if cursor.rowcount:
            logger.debug("Deleted room %s", room_id)
