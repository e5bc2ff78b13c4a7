"""
Outbound side of a client connection.

A ClientSink is the handle the registry stores for each online user. Sending
only queues the line; the session that owns the connection writes queued
lines to the socket and decides when the connection closes.
"""

import asyncio
from typing import Callable, Optional

from chat_common.constants import MAX_PENDING_LINES


class SinkOverflowError(ConnectionError):
    """The client stopped reading and its outbound queue is full."""


class ClientSink:
    """Bounded outbound line queue for one connection."""

    def __init__(self, peer=None, max_pending: int = MAX_PENDING_LINES,
                 on_overflow: Optional[Callable[[], None]] = None):
        self.peer = peer
        self._pending: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._on_overflow = on_overflow
        self._closed = False

    async def send_line(self, text: str):
        """
        Queue one line for delivery. Never waits on the network.

        Raises ConnectionResetError once the sink is closed, and
        SinkOverflowError when the client has fallen too far behind.
        """
        if self._closed:
            raise ConnectionResetError(f"connection to {self.peer} is closed")
        try:
            self._pending.put_nowait(text)
        except asyncio.QueueFull:
            self._closed = True
            if self._on_overflow is not None:
                self._on_overflow()
            raise SinkOverflowError(f"{self.peer} has {self._pending.qsize()} unread lines")

    async def send_lines(self, lines):
        for line in lines:
            await self.send_line(line)

    async def next_line(self) -> str:
        """Wait for the next queued line. Pair every call with ``line_done``."""
        return await self._pending.get()

    def line_done(self):
        self._pending.task_done()

    async def wait_flushed(self):
        """Return once every queued line has been handed to the transport."""
        await self._pending.join()

    def close(self):
        """Refuse further lines; already queued lines can still be flushed."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._pending.qsize()

    def __repr__(self):
        return f"ClientSink(peer={self.peer!r}, pending={self.pending()})"
