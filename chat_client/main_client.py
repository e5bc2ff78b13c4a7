#!/usr/bin/env python3
"""
Text Chat Client - Main Entry Point

Prints every line the server sends and forwards every line typed on the
console. The first line typed is sent as the user's name; the server
decides whether it is accepted.
"""

import argparse
import asyncio
import sys
import threading
from typing import Optional

from chat_common.constants import CLIENT_READ_LIMIT, DEFAULT_HOST, DEFAULT_PORT
from chat_common.protocol_definitions import (
    CONNECTION_LOST_NOTICE, create_connect_failed_notice, decode_line, encode_line
)
from chat_client.utils.config import ClientConfig
from chat_client.utils.logger import logger


class ChatClient:
    """Terminal chat client."""

    def __init__(self, config: Optional[ClientConfig] = None, stdin=None, stdout=None, stderr=None):
        self.config = config or ClientConfig()
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> bool:
        """Open the connection to the server."""
        try:
            self.reader, self.writer = await asyncio.open_connection(
                limit=CLIENT_READ_LIMIT, **self.config.get_connection_info()
            )
        except OSError as e:
            logger.log_connection(self.config.host, self.config.port, False)
            print(create_connect_failed_notice(e), file=self.stderr, flush=True)
            return False
        logger.log_connection(self.config.host, self.config.port, True)
        return True

    def display(self, line: str):
        print(line, file=self.stdout, flush=True)

    async def receive_lines(self, reader: asyncio.StreamReader):
        """Print incoming lines verbatim until the server goes away."""
        try:
            while True:
                data = await reader.readline()
                if not data:
                    break
                self.display(decode_line(data))
        except (OSError, ValueError) as e:
            logger.log_error("receive", e)
        self.display(CONNECTION_LOST_NOTICE)

    async def send_lines(self, writer: asyncio.StreamWriter, queue: asyncio.Queue):
        """Forward console lines to the server; a None item means console EOF."""
        while True:
            line = await queue.get()
            if line is None:
                return
            try:
                writer.write(encode_line(line.rstrip('\r\n')))
                await writer.drain()
            except OSError as e:
                logger.log_error("send", e)
                return

    def _read_console(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        """Blocking console reader; runs on a daemon thread."""
        try:
            for line in iter(self.stdin.readline, ''):
                loop.call_soon_threadsafe(queue.put_nowait, line)
            loop.call_soon_threadsafe(queue.put_nowait, None)
        except RuntimeError:
            # Event loop already closed: the client is exiting.
            return

    async def run(self) -> int:
        """Main client loop. Returns a process exit status."""
        if not await self.connect():
            return 1

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        console_thread = threading.Thread(target=self._read_console, args=(loop, queue), daemon=True)
        console_thread.start()

        receive_task = asyncio.create_task(self.receive_lines(self.reader))
        send_task = asyncio.create_task(self.send_lines(self.writer, queue))

        try:
            done, pending = await asyncio.wait(
                {receive_task, send_task}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        finally:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error while closing connection: {e}")
        return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Text Chat Client')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST,
                        help=f'Server address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    args = parser.parse_args(argv)

    client = ChatClient(ClientConfig(args.host, args.port))
    try:
        return asyncio.run(client.run())
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
