"""Shared test fixtures and stream doubles for the chat server tests."""
import asyncio

import pytest

from peach.services.room_manager import RoomRegistry


class FakeWriter:
    """Collects everything a session writes to its client."""

    def __init__(self, peer=("127.0.0.1", 50000)):
        self.buffer = bytearray()
        self.closed = False
        self.peer = peer

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass

    def get_extra_info(self, name, default=None):
        if name == "peername":
            return self.peer
        return default

    @property
    def text(self) -> str:
        return self.buffer.decode("utf-8")


class BrokenWriter(FakeWriter):
    """A client whose socket is already gone."""

    async def drain(self) -> None:
        raise ConnectionResetError("peer reset")


class ChunkReader:
    """Returns one queued chunk per read call, then EOF."""

    def __init__(self, *chunks: bytes):
        self.chunks = list(chunks)
        self.reads = 0

    async def read(self, n: int) -> bytes:
        self.reads += 1
        if not self.chunks:
            return b""
        return self.chunks.pop(0)


def stream_reader(data: bytes = b"", eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true, yielding to other tasks in between."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def registry():
    return RoomRegistry(capacity=100)
