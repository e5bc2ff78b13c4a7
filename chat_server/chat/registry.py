"""
Online user registry.

Maps each registered display name to the sink of its connection. This is the
only state shared between sessions.
"""

import asyncio
from typing import Dict, List, Optional

from chat_server.chat.sink import ClientSink


class ClientRegistry:
    """Name -> sink mapping, internally synchronized with an asyncio lock."""

    def __init__(self):
        self._clients: Dict[str, ClientSink] = {}
        self.lock = asyncio.Lock()  # Protect shared state

    async def try_register(self, name: str, sink: ClientSink) -> bool:
        """
        Insert ``name`` -> ``sink`` only if the name is free.

        The membership test and the insert happen under one lock acquisition,
        so of several concurrent attempts for one name exactly one succeeds.
        """
        async with self.lock:
            if name in self._clients:
                return False
            self._clients[name] = sink
            return True

    async def lookup(self, name: str) -> Optional[ClientSink]:
        """Return the sink registered under ``name``, or None."""
        async with self.lock:
            return self._clients.get(name)

    async def remove(self, name: str):
        """Drop ``name``; a name that is not registered is ignored."""
        async with self.lock:
            self._clients.pop(name, None)

    async def snapshot_sinks(self) -> List[ClientSink]:
        """Copy of the current sinks, safe to iterate while others join or leave."""
        async with self.lock:
            return list(self._clients.values())

    async def names(self) -> List[str]:
        """Names of the currently registered users, in registration order."""
        async with self.lock:
            return list(self._clients)

    def count(self) -> int:
        """
        Get the number of currently registered users.

        Reads without the lock: len() on the dict cannot suspend, so it never
        sees a half-finished insert or remove.
        """
        return len(self._clients)
