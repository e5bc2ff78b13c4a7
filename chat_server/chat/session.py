"""
Per-connection session handling.

Each accepted connection gets one ChatSession running in its own task:
name registration first, then the message loop, then teardown. A second
task owned by the session writes the sink's queued lines to the socket, so
a client that stops reading only ever holds up its own output.
"""

import asyncio
from enum import Enum
from typing import Optional

from chat_common.constants import FLUSH_TIMEOUT
from chat_common.protocol_definitions import (
    INVALID_NAME_NOTICE, NAME_PROMPT, NAME_TAKEN_NOTICE,
    create_user_joined_notice, create_user_left_notice, create_welcome_lines,
    decode_line, encode_line, is_blank, is_private_command, is_valid_name
)
from chat_server.chat.registry import ClientRegistry
from chat_server.chat.router import MessageRouter
from chat_server.chat.sink import ClientSink
from chat_server.utils.logger import logger


class SessionState(Enum):
    CONNECTING = 'connecting'
    REGISTERING = 'registering'
    ACTIVE = 'active'
    TERMINATED = 'terminated'


class ChatSession:
    """State machine for one client connection."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 registry: ClientRegistry, router: MessageRouter):
        self.reader = reader
        self.writer = writer
        self.registry = registry
        self.router = router
        self.peer = writer.get_extra_info('peername')
        self.sink = ClientSink(self.peer, on_overflow=self._on_overflow)
        self.name: Optional[str] = None
        self.state = SessionState.CONNECTING
        self._output_task: Optional[asyncio.Task] = None

    async def run(self):
        """Drive the session until the connection closes or fails."""
        logger.log_connection(self.peer)
        self._output_task = asyncio.create_task(self._pump_output())
        self.state = SessionState.REGISTERING
        try:
            if await self._register():
                self.state = SessionState.ACTIVE
                await self.router.announce(create_user_joined_notice(self.name))
                await self._message_loop()
        except asyncio.CancelledError:
            logger.info(f"Session cancelled for {self._describe()}")
            raise
        except (OSError, ValueError) as e:
            # ValueError: line longer than the StreamReader limit
            logger.log_error(f"session {self._describe()}", e)
        finally:
            await self._terminate()

    async def _pump_output(self):
        """Write queued lines to the socket, one at a time, in order."""
        while True:
            line = await self.sink.next_line()
            try:
                self.writer.write(encode_line(line))
                await self.writer.drain()
            except OSError as e:
                logger.debug(f"Write to {self.peer} failed: {e}")
                self._abort()
                return
            finally:
                self.sink.line_done()

    def _on_overflow(self):
        logger.warning(f"Dropping {self._describe()}: {self.sink.pending()} lines unread")
        self._abort()

    def _abort(self):
        """Drop the connection; the pending read then ends the session."""
        self.sink.close()
        self.writer.transport.abort()

    async def _read_line(self) -> Optional[str]:
        """Read the next line; None once the peer has closed its side."""
        data = await self.reader.readline()
        if not data:
            return None
        return decode_line(data)

    async def _register(self) -> bool:
        """
        Prompt for a name until one is accepted.

        Returns False if the peer disconnects before choosing a valid,
        free name.
        """
        while True:
            await self.sink.send_line(NAME_PROMPT)
            name = await self._read_line()
            if name is None:
                return False

            if not is_valid_name(name):
                logger.log_rejection(self.peer, name, "blank or contains whitespace")
                await self.sink.send_line(INVALID_NAME_NOTICE)
                continue

            if not await self.registry.try_register(name, self.sink):
                logger.log_rejection(self.peer, name, "already taken")
                await self.sink.send_line(NAME_TAKEN_NOTICE)
                continue

            self.name = name
            await self.sink.send_lines(create_welcome_lines(name))
            logger.log_join(name, self.peer)
            return True

    async def _message_loop(self):
        while True:
            line = await self._read_line()
            if line is None:
                return
            if is_blank(line):
                continue
            if is_private_command(line):
                await self.router.private_message(self.name, line)
            else:
                await self.router.broadcast(self.name, line)

    async def _terminate(self):
        """Release the name (if any), tell the others, close the connection. Runs once."""
        if self.state is SessionState.TERMINATED:
            return
        self.state = SessionState.TERMINATED

        try:
            if self.name is not None:
                await self.registry.remove(self.name)
                logger.log_leave(self.name)
                await self.router.announce(create_user_left_notice(self.name))
        finally:
            self.sink.close()
            await self._stop_output()
            await self._close()

    async def _stop_output(self):
        """Give queued lines a short chance to go out, then stop the output task."""
        task = self._output_task
        if task is None:
            return
        flushed = asyncio.ensure_future(self.sink.wait_flushed())
        if not task.done() and not self.writer.is_closing():
            await asyncio.wait({flushed, task}, timeout=FLUSH_TIMEOUT,
                               return_when=asyncio.FIRST_COMPLETED)
        if self.sink.pending():
            logger.debug(f"{self.sink.pending()} lines to {self.peer} left unsent")
        flushed.cancel()
        task.cancel()
        await asyncio.gather(flushed, task, return_exceptions=True)

    async def _close(self):
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing connection to {self.peer}: {e}")
        logger.log_disconnect(self.peer, self.name)

    def _describe(self) -> str:
        if self.name is not None:
            return f"{self.name} ({self.peer})"
        return str(self.peer)
