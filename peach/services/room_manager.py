# peach/services/room_manager.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from peach.core.config import settings
from peach.services.broadcast import Broadcast, Receiver

logger = logging.getLogger(__name__)

# ============================================================================
# ROOM STATE
# ============================================================================

class Transcript:
    """
    Append-only record of the rendered lines of one room.

    Each transcript owns its own lock so activity in different rooms never
    contends. Callers that append and then publish must hold ``lock`` for
    both steps, which keeps transcript order and delivery order identical.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self._lines: List[str] = []

    def append(self, line: str) -> None:
        self._lines.append(line)

    def lines(self) -> List[str]:
        return list(self._lines)

    def text(self) -> str:
        return "".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


class Room:
    """A named broadcast domain: transcript plus live subscriber set."""

    def __init__(self, name: str, capacity: int) -> None:
        self.name = name
        self.transcript = Transcript()
        self.broadcast = Broadcast(capacity)
        self.created_at = datetime.now(timezone.utc)

    @property
    def subscriber_count(self) -> int:
        return self.broadcast.receiver_count

# ============================================================================
# ROOM REGISTRY
# ============================================================================

class RoomRegistry:
    """
    Shared mapping of room name -> Room.

    One registry is created by the driver and handed to every connection.
    Rooms are created lazily on first join and are never removed, even when
    the last subscriber leaves.

    Attributes:
        messages_published: number of publishes that found their room
        active_connections: sessions currently being served
        started_at: when the registry (and server) came up

    Usage:
        registry = new_room_registry()
        receiver, transcript = await registry.join("general")
        await registry.publish("general", "hello\\n")
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        self.capacity = capacity or settings.SUBSCRIBER_BUFFER
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

        self.messages_published = 0
        self.active_connections = 0
        self.started_at = datetime.now(timezone.utc)

    async def join(self, name: str) -> Tuple[Receiver, Transcript]:
        """
        Subscribe to a room, creating it on first use.

        Lookup, creation and subscription happen under the registry lock,
        so concurrent first joins to the same name share one Room.

        Returns:
            A fresh receiver for future publishes and the room's transcript.
        """
        async with self._lock:
            room = self._rooms.get(name)
            if room is None:
                room = Room(name, self.capacity)
                self._rooms[name] = room
                logger.info("✓ Created room '%s' (%d rooms)", name, len(self._rooms))
            receiver = room.broadcast.subscribe()

        logger.debug("→ Subscribed to '%s' (%d subscribers)", name, room.subscriber_count)
        return receiver, room.transcript

    async def publish(self, name: str, message: str) -> int:
        """
        Send a message to every subscriber of a room.

        Publishing to a room that does not exist is a no-op: it only
        happens when a caller skipped ``join``.

        Returns:
            Number of receivers the message was handed to.
        """
        async with self._lock:
            room = self._rooms.get(name)
            if room is None:
                logger.warning("Skipped publish: room '%s' does not exist", name)
                return 0
            delivered = room.broadcast.send(message)
            self.messages_published += 1

        logger.debug("📨 Published to '%s': %d receivers", name, delivered)
        return delivered

    def get_room(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def list_rooms(self) -> List[Room]:
        return list(self._rooms.values())


def new_room_registry(capacity: Optional[int] = None) -> RoomRegistry:
    return RoomRegistry(capacity)
