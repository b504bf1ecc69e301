"""Tests for the in-process fan-out primitive."""
import asyncio

import pytest

from peach.services.broadcast import Broadcast


@pytest.mark.asyncio
async def test_every_receiver_gets_every_message_in_order():
    broadcast = Broadcast(capacity=10)
    receivers = [broadcast.subscribe() for _ in range(3)]

    assert broadcast.send("one") == 3
    assert broadcast.send("two") == 3

    for receiver in receivers:
        assert await receiver.recv() == "one"
        assert await receiver.recv() == "two"


@pytest.mark.asyncio
async def test_late_subscriber_sees_no_replay():
    broadcast = Broadcast(capacity=10)
    early = broadcast.subscribe()
    broadcast.send("before")

    late = broadcast.subscribe()
    broadcast.send("after")

    assert late.pending() == 1
    assert await late.recv() == "after"
    assert await early.recv() == "before"


@pytest.mark.asyncio
async def test_slow_receiver_drops_oldest_and_never_blocks_publisher():
    broadcast = Broadcast(capacity=2)
    slow = broadcast.subscribe()

    for message in ("a", "b", "c", "d"):
        broadcast.send(message)

    assert slow.lagged == 2
    assert slow.pending() == 2
    assert await slow.recv() == "c"
    assert await slow.recv() == "d"


@pytest.mark.asyncio
async def test_recv_waits_for_publish():
    broadcast = Broadcast(capacity=4)
    receiver = broadcast.subscribe()

    task = asyncio.ensure_future(receiver.recv())
    await asyncio.sleep(0)
    assert not task.done()

    broadcast.send("wake")
    assert await asyncio.wait_for(task, timeout=1) == "wake"


@pytest.mark.asyncio
async def test_closed_receiver_is_unsubscribed():
    broadcast = Broadcast(capacity=4)
    keep = broadcast.subscribe()
    gone = broadcast.subscribe()

    gone.close()
    gone.close()

    assert broadcast.receiver_count == 1
    assert broadcast.send("hi") == 1
    assert gone.pending() == 0
    assert await keep.recv() == "hi"


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        Broadcast(capacity=0)
