#!/usr/bin/env python3
"""
Unit tests for the terminal chat client.

- Incoming lines are printed verbatim
- Console lines are forwarded verbatim
- Lost and refused connections are reported
"""

import asyncio
import io
import socket
import threading
import unittest
from unittest.mock import AsyncMock, Mock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chat_client.main_client import ChatClient
from chat_client.utils.config import ClientConfig
from chat_common.constants import MAX_INPUT_LINE
from chat_common.protocol_definitions import (
    CONNECTION_LOST_NOTICE, NAME_PROMPT, USAGE_HINT, create_user_joined_notice,
    decode_line, encode_line
)
from chat_server.main_server import ChatServerApp
from chat_server.utils.config import ServerConfig


class BlockingConsole:
    """Console that yields the given lines, then blocks until released."""

    def __init__(self, lines):
        self._lines = list(lines)
        self.released = threading.Event()

    def readline(self):
        if self._lines:
            return self._lines.pop(0)
        self.released.wait()
        return ''


def free_port():
    with socket.socket() as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestReceiveLines(unittest.IsolatedAsyncioTestCase):

    async def test_prints_lines_then_connection_lost(self):
        out = io.StringIO()
        client = ChatClient(stdout=out)
        reader = asyncio.StreamReader()
        reader.feed_data(f"{NAME_PROMPT}\n[10:00:00] [bob]: hi\r\n".encode('utf-8'))
        reader.feed_eof()

        await client.receive_lines(reader)

        self.assertEqual(out.getvalue().splitlines(),
                         [NAME_PROMPT, "[10:00:00] [bob]: hi", CONNECTION_LOST_NOTICE])


class TestSendLines(unittest.IsolatedAsyncioTestCase):

    async def test_forwards_lines_verbatim(self):
        client = ChatClient()
        writer = Mock()
        writer.drain = AsyncMock()
        queue = asyncio.Queue()
        for line in ("alice\n", "/msg bob  hi there\n", "   \n", None):
            queue.put_nowait(line)

        await client.send_lines(writer, queue)

        written = [call.args[0] for call in writer.write.call_args_list]
        self.assertEqual(written, [b"alice\n", b"/msg bob  hi there\n", b"   \n"])

    async def test_stops_on_write_error(self):
        client = ChatClient()
        writer = Mock()
        writer.drain = AsyncMock(side_effect=ConnectionResetError("gone"))
        queue = asyncio.Queue()
        queue.put_nowait("hello\n")
        queue.put_nowait("never sent\n")

        with self.assertLogs('chat_client', level='ERROR'):
            await client.send_lines(writer, queue)

        self.assertEqual(writer.write.call_count, 1)


class TestRun(unittest.IsolatedAsyncioTestCase):

    async def test_connect_failure_reported(self):
        err = io.StringIO()
        client = ChatClient(ClientConfig('127.0.0.1', free_port()), stderr=err)

        self.assertEqual(await client.run(), 1)
        self.assertIn("Не удалось подключиться к серверу:", err.getvalue())

    async def test_session_against_server(self):
        received = []

        async def handle(reader, writer):
            writer.write(f"{NAME_PROMPT}\n".encode('utf-8'))
            await writer.drain()
            received.append((await reader.readline()).decode('utf-8'))
            writer.write("--- Добро пожаловать в чат, alice! ---\n".encode('utf-8'))
            await writer.drain()
            writer.close()
            await writer.wait_closed()

        server = await asyncio.start_server(handle, '127.0.0.1', 0)
        port = server.sockets[0].getsockname()[1]
        console = BlockingConsole(["alice\n"])
        out = io.StringIO()
        client = ChatClient(ClientConfig('127.0.0.1', port), stdin=console, stdout=out)

        try:
            status = await asyncio.wait_for(client.run(), 5)
        finally:
            console.released.set()
            server.close()
            await server.wait_closed()

        self.assertEqual(status, 0)
        self.assertEqual(received, ["alice\n"])
        self.assertEqual(out.getvalue().splitlines(), [
            NAME_PROMPT,
            "--- Добро пожаловать в чат, alice! ---",
            CONNECTION_LOST_NOTICE,
        ])


class TestLongLines(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.app = ChatServerApp(ServerConfig(host='127.0.0.1', port=0))
        await self.app.listen()
        self.port = self.app.bound_port()

    async def asyncTearDown(self):
        self.app.server.close()
        await asyncio.wait_for(self.app.server.wait_closed(), 5)

    async def register(self, reader, writer, name):
        self.assertEqual(decode_line(await reader.readline()), NAME_PROMPT)
        writer.write(encode_line(name))
        await writer.drain()
        for expected in (f"--- Добро пожаловать в чат, {name}! ---", USAGE_HINT,
                         create_user_joined_notice(name)):
            self.assertEqual(decode_line(await reader.readline()), expected)

    async def test_broadcast_of_longest_accepted_line(self):
        out = io.StringIO()
        bob = ChatClient(ClientConfig('127.0.0.1', self.port), stdout=out)
        self.assertTrue(await bob.connect())
        await self.register(bob.reader, bob.writer, "bob")

        alice_reader, alice_writer = await asyncio.open_connection(
            '127.0.0.1', self.port, limit=4 * MAX_INPUT_LINE
        )
        await self.register(alice_reader, alice_writer, "alice")
        self.assertEqual(decode_line(await bob.reader.readline()), create_user_joined_notice("alice"))

        receive_task = asyncio.create_task(bob.receive_lines(bob.reader))
        text = "y" * (MAX_INPUT_LINE - 6)
        alice_writer.write(encode_line(text))
        await alice_writer.drain()

        for _ in range(300):
            if text in out.getvalue() or receive_task.done():
                break
            await asyncio.sleep(0.01)

        alice_writer.close()
        bob.writer.close()
        await asyncio.wait_for(receive_task, 5)
        await asyncio.gather(alice_writer.wait_closed(), bob.writer.wait_closed(),
                             return_exceptions=True)

        lines = out.getvalue().splitlines()
        self.assertTrue(lines[0].endswith("[alice]: " + text))
        self.assertGreater(len(lines[0].encode('utf-8')), MAX_INPUT_LINE)


if __name__ == '__main__':
    unittest.main()
