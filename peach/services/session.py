# peach/services/session.py

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import NamedTuple, Optional

from peach.core import display
from peach.core.config import settings
from peach.services.broadcast import Receiver
from peach.services.framing import LineFramer
from peach.services.room_manager import RoomRegistry, Transcript

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"

# ============================================================================
# SESSION TYPES
# ============================================================================

class SessionState(str, Enum):
    LOGIN = "login"
    CLIENT_SELECT = "client_select"
    ACTIVE = "active"
    TERMINATED = "terminated"


class ClientKind(str, Enum):
    NETCAT = "netcat"


# Menu token -> client kind. An empty answer picks the default.
CLIENT_CHOICES = {"1": ClientKind.NETCAT, "": ClientKind.NETCAT}


class Subscription(NamedTuple):
    receiver: Receiver
    transcript: Transcript

# ============================================================================
# CONNECTION SESSION
# ============================================================================

class ConnectionSession:
    """
    State machine for one connected client.

    States:
        LOGIN          prompt for a display name until a valid one is given
        CLIENT_SELECT  ask which client is in use (only Netcat today)
        ACTIVE         relay room broadcasts to the client and client lines
                       to the room; handle /join
        TERMINATED     peer disconnected, subscription released

    Only the session task writes to ``writer``, so output to one client is
    never interleaved.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        registry: RoomRegistry,
        chunk_size: Optional[int] = None,
    ) -> None:
        self.writer = writer
        self.registry = registry
        self.framer = LineFramer(reader, chunk_size)

        self.state = SessionState.LOGIN
        self.name: Optional[str] = None
        self.client: Optional[ClientKind] = None
        self.room = settings.DEFAULT_ROOM
        self.subscription: Optional[Subscription] = None
        self.left_announced = False

        peer = writer.get_extra_info("peername")
        self.peer = ":".join(str(p) for p in peer) if isinstance(peer, tuple) else str(peer)

    async def run(self) -> None:
        try:
            if await self.login() and await self.select_client():
                await self.chat()
        finally:
            if self.state == SessionState.ACTIVE and not self.left_announced:
                await self.announce_leave()
            self.state = SessionState.TERMINATED
            if self.subscription is not None:
                self.subscription.receiver.close()

    # ------------------------------------------------------------------
    # Handshake
    # ------------------------------------------------------------------

    async def login(self) -> bool:
        """Prompt until a valid name arrives. False if the peer went away."""
        while True:
            await self.send(display.WELCOME_PROMPT)
            text, count = await self.framer.read_line()
            if count == 0:
                return False

            name = text.strip()
            if display.is_valid_name(name):
                self.name = name
                self.state = SessionState.CLIENT_SELECT
                return True

            logger.debug("%s offered invalid name %r", self.peer, name)
            await self.send(display.INVALID_NAME_NOTICE)

    async def select_client(self) -> bool:
        while True:
            await self.send(display.CLIENT_PROMPT)
            text, count = await self.framer.read_line()
            if count == 0:
                return False

            client = CLIENT_CHOICES.get(text.strip())
            if client is not None:
                self.client = client
                self.room = settings.DEFAULT_ROOM
                self.state = SessionState.ACTIVE
                return True

    # ------------------------------------------------------------------
    # Message loop
    # ------------------------------------------------------------------

    async def chat(self) -> None:
        """
        Race broadcast deliveries against client input until disconnect.

        Each source has at most one pending task. Whichever finishes is
        handled and re-issued while the other keeps waiting, so a partially
        read line is never dropped and neither source starves.
        """
        await self.enter_room(self.room)
        logger.info("→ %s (%s) joined '%s'", self.name, self.peer, self.room)

        recv_task: Optional[asyncio.Task] = None
        read_task: Optional[asyncio.Task] = None

        try:
            while True:
                if recv_task is None:
                    recv_task = asyncio.ensure_future(self.subscription.receiver.recv())
                if read_task is None:
                    read_task = asyncio.ensure_future(self.framer.read_line())

                done, _ = await asyncio.wait(
                    {recv_task, read_task}, return_when=asyncio.FIRST_COMPLETED
                )

                if recv_task in done:
                    message = recv_task.result()
                    recv_task = None
                    await self.send(display.render_delivery(message, self.room))

                if read_task in done:
                    text, count = read_task.result()
                    read_task = None

                    if count == 0:
                        await self.post(display.left_line(self.name))
                        self.left_announced = True
                        logger.info("✗ %s (%s) left '%s'", self.name, self.peer, self.room)
                        return

                    receiver = self.subscription.receiver
                    await self.handle_line(text)

                    # A /join replaced the receiver; stop waiting on the old one
                    if self.subscription.receiver is not receiver and recv_task is not None:
                        recv_task.cancel()
                        recv_task = None
        finally:
            for task in (recv_task, read_task):
                if task is not None:
                    task.cancel()

    async def handle_line(self, text: str) -> None:
        if text.startswith(COMMAND_PREFIX):
            await self.handle_command(text.split())
            return

        await self.post(display.message_line(self.name, text.strip()))

    async def handle_command(self, tokens: list) -> None:
        command, args = tokens[0], tokens[1:]

        if command == "/join":
            if len(args) != 1:
                await self.send(display.JOIN_USAGE)
                return
            await self.switch_room(args[0])
            return

        logger.debug("%s sent unknown command %r", self.name, command)
        await self.send(display.COMMAND_NOT_FOUND)

    # ------------------------------------------------------------------
    # Room membership
    # ------------------------------------------------------------------

    async def enter_room(self, room: str) -> None:
        receiver, transcript = await self.registry.join(room)
        old, self.subscription = self.subscription, Subscription(receiver, transcript)
        self.room = room
        if old is not None:
            old.receiver.close()
        await self.post(display.joined_line(self.name))

    async def switch_room(self, room: str) -> None:
        """Leave the current room, then join ``room``. Left always precedes joined."""
        previous = self.room
        await self.post(display.left_line(self.name))
        self.left_announced = True
        await self.enter_room(room)
        self.left_announced = False
        logger.info("→ %s moved '%s' -> '%s'", self.name, previous, room)

    async def announce_leave(self) -> None:
        """Tell the room this session is gone after it failed mid-chat."""
        if self.subscription is None:
            return
        try:
            await self.post(display.left_line(self.name))
            self.left_announced = True
        except Exception:
            logger.exception("Could not announce %s leaving '%s'", self.name, self.room)

    async def post(self, line: str) -> None:
        """
        Append a line to the current room's transcript and publish it.

        Both steps run under the transcript lock. The published payload is
        the transcript text up to and including ``line``, which the client
        redraws after clearing its screen.
        """
        transcript = self.subscription.transcript
        async with transcript.lock:
            transcript.append(line)
            await self.registry.publish(self.room, transcript.text())

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    async def send(self, text: str) -> None:
        """Best-effort write; a failing peer is noticed by the next read."""
        try:
            self.writer.write(text.encode("utf-8"))
            await self.writer.drain()
        except (ConnectionError, OSError) as e:
            logger.warning("Write to %s failed: %s", self.peer, e)

# ============================================================================
# ENTRY POINT
# ============================================================================

async def handle_connection(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    registry: RoomRegistry,
) -> None:
    """
    Serve one accepted connection until it disconnects.

    Every failure stays inside this connection: it is logged and the
    stream is closed, other sessions and the registry are untouched.
    """
    session = ConnectionSession(reader, writer, registry)
    registry.active_connections += 1
    logger.info("✓ Connection from %s. Total: %d", session.peer, registry.active_connections)

    try:
        await session.run()
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception("Session for %s failed", session.peer)
    finally:
        registry.active_connections -= 1
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass
        logger.info("✗ Disconnected %s. Total: %d", session.peer, registry.active_connections)
