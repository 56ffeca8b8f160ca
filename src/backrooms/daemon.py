"""Network listener exposing a read-only room count.

Protocol, one command per line:

- ``list``: reply ``ROOMS <n>``
- ``disconnect``: reply ``SESSION CLOSED`` and close
- anything else: reply ``UNKNOWN``

Every reply except the last is followed by a ``> `` prompt.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable

from .config import Config
from .persistence import PersistenceBackend, open_backend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], PersistenceBackend]


def backend_factory(config: Config) -> BackendFactory:
    """Factory opening a fresh backend handle from config."""
    path = Path(config.persistence.path).expanduser()

    def factory() -> PersistenceBackend:
        return open_backend(config.persistence.backend, path)

    return factory


class RoomDaemon:
    """Serves the line protocol to concurrent clients."""

    BUSY_MESSAGE = b"BUSY\n"

    def __init__(self, config: Config, factory: BackendFactory | None = None) -> None:
        self.config = config
        self.factory = factory or backend_factory(config)
        self._active = 0
        self._server: asyncio.AbstractServer | None = None

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Run one client session."""
        peer = writer.get_extra_info("peername")
        if self._active >= self.config.daemon.max_connections:
            logger.warning("Refusing client %s: connection limit reached", peer)
            writer.write(self.BUSY_MESSAGE)
            await writer.drain()
            writer.close()
            return

        self._active += 1
        try:
            backend = self.factory()
            writer.write(b"CONNECTED\n> ")
            await writer.drain()
            while True:
                line = await reader.readline()
                if not line:
                    break
                cmd = line.decode("utf-8", errors="replace").strip()

                if cmd.lower() == "disconnect":
                    writer.write(b"SESSION CLOSED\n")
                    await writer.drain()
                    break

                if cmd.lower() == "list":
                    rooms = await asyncio.to_thread(backend.list_rooms)
                    writer.write(f"ROOMS {len(rooms)}\n".encode())
                else:
                    writer.write(b"UNKNOWN\n")
                writer.write(b"> ")
                await writer.drain()
        except Exception as e:
            logger.warning("Client %s error: %s", peer, e)
        finally:
            self._active -= 1
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def start(self, host: str, port: int) -> asyncio.AbstractServer:
        """Initialize storage and start listening."""
        await asyncio.to_thread(self.factory().init)
        self._server = await asyncio.start_server(self.handle_client, host, port)
        logger.info("Listening on %s:%d", host, port)
        return self._server

    async def serve_forever(self) -> None:
        """Listen on the configured address until cancelled."""
        host, port = self.config.daemon.address()
        server = await self.start(host, port)
        async with server:
            await server.serve_forever()


def run(config: Config) -> None:
    """Run the listener in the foreground."""
    print("STARTING DAEMON MODE", file=sys.stderr)
    print(f"BIND_ADDRESS: {config.daemon.bind}", file=sys.stderr)
    try:
        asyncio.run(RoomDaemon(config).serve_forever())
    except KeyboardInterrupt:
        pass


async def _relay(config: Config) -> None:
    host, port = config.daemon.address()
    reader, writer = await asyncio.open_connection(host, port)
    try:
        banner = await reader.readline()
        sys.stdout.write(banner.decode())
        while True:
            prompt = await reader.readexactly(2)
            sys.stdout.write(prompt.decode())
            sys.stdout.flush()
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            writer.write(line.encode())
            await writer.drain()
            reply = await reader.readline()
            if not reply:
                break
            sys.stdout.write(reply.decode())
            if reply.strip() == b"SESSION CLOSED":
                break
    except asyncio.IncompleteReadError:
        pass
    finally:
        writer.close()


def connect(config: Config) -> None:
    """Relay stdin lines to a running listener and print its replies."""
    asyncio.run(_relay(config))
