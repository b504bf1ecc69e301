# peach/services/framing.py

from __future__ import annotations

import asyncio
import logging
from typing import Tuple

from peach.core.config import settings

logger = logging.getLogger(__name__)


class LineFramer:
    """
    Splits a raw client byte stream into lines.

    Reads ``chunk_size`` bytes at a time until a ``\\n`` is buffered, then
    hands back one frame. A ``\\r`` directly after the ``\\n`` belongs to the
    same frame (some clients send ``\\n\\r``). Bytes that arrive after the
    frame stay buffered for the next call, so a read that carries several
    lines loses none of them.

    Decoding is lossy: invalid UTF-8 becomes U+FFFD rather than failing.
    """

    def __init__(self, reader: asyncio.StreamReader, chunk_size: int | None = None) -> None:
        self.reader = reader
        self.chunk_size = chunk_size or settings.READ_CHUNK_SIZE
        self._pending = b""
        # Last frame ended at the buffer edge; a following \r still belongs to it
        self._expect_cr = False

    async def read_line(self) -> Tuple[str, int]:
        """
        Read the next line.

        Returns:
            (text, byte_count). A byte_count of 0 means the peer closed the
            stream or the read failed; text then holds whatever partial
            input had been buffered.
        """
        carried = 0
        while True:
            if self._expect_cr and self._pending:
                self._expect_cr = False
                if self._pending.startswith(b"\r"):
                    self._pending = self._pending[1:]
                    carried += 1

            if b"\n" in self._pending:
                break

            try:
                chunk = await self.reader.read(self.chunk_size)
            except (ConnectionError, OSError) as e:
                logger.debug("Read failed: %s", e)
                chunk = b""

            if not chunk:
                partial, self._pending = self._pending, b""
                return self._decode(partial), 0

            self._pending += chunk

        end = self._pending.index(b"\n") + 1
        if self._pending[end:end + 1] == b"\r":
            end += 1
        elif end == len(self._pending):
            self._expect_cr = True

        frame, self._pending = self._pending[:end], self._pending[end:]
        return self._decode(frame), len(frame) + carried

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode("utf-8", errors="replace")
