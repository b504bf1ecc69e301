# peach/services/broadcast.py

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Deque, Set

logger = logging.getLogger(__name__)

# ============================================================================
# IN-PROCESS FAN-OUT
# ============================================================================

class Receiver:
    """
    One subscriber's view of a Broadcast.

    Messages are queued in a bounded deque. When the deque is full the
    oldest pending message is dropped and ``lagged`` is incremented, so a
    slow reader loses history instead of stalling the publisher.

    A receiver has a single consumer: the session task that owns it.
    """

    def __init__(self, broadcast: Broadcast, capacity: int) -> None:
        self._broadcast = broadcast
        self._queue: Deque[str] = deque(maxlen=capacity)
        self._ready = asyncio.Event()
        self.lagged = 0
        self.closed = False

    def _push(self, message: str) -> None:
        if len(self._queue) == self._queue.maxlen:
            self.lagged += 1
            logger.debug("Receiver full, dropped oldest message (lagged=%d)", self.lagged)
        self._queue.append(message)
        self._ready.set()

    def pending(self) -> int:
        return len(self._queue)

    async def recv(self) -> str:
        """Wait for the next message published after this receiver subscribed."""
        while not self._queue:
            self._ready.clear()
            await self._ready.wait()
        return self._queue.popleft()

    def close(self) -> None:
        """Unsubscribe; undelivered messages are discarded."""
        if self.closed:
            return
        self.closed = True
        self._broadcast._unsubscribe(self)
        self._queue.clear()


class Broadcast:
    """
    Single-publisher-per-call, multi-subscriber distribution point.

    ``send`` hands the message to every live receiver without awaiting,
    so publishing never blocks on a slow or idle subscriber. A receiver
    only sees messages sent after ``subscribe`` returned it.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("broadcast capacity must be at least 1")
        self.capacity = capacity
        self._receivers: Set[Receiver] = set()

    @property
    def receiver_count(self) -> int:
        return len(self._receivers)

    def subscribe(self) -> Receiver:
        receiver = Receiver(self, self.capacity)
        self._receivers.add(receiver)
        return receiver

    def send(self, message: str) -> int:
        """Deliver ``message`` to every receiver. Returns how many were reached."""
        receivers = list(self._receivers)
        for receiver in receivers:
            receiver._push(message)
        return len(receivers)

    def _unsubscribe(self, receiver: Receiver) -> None:
        self._receivers.discard(receiver)
