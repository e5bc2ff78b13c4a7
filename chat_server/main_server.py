#!/usr/bin/env python3
"""
Text Chat Server - Main Entry Point

Accepts TCP connections and runs one chat session per connection.
"""

import argparse
import asyncio
import sys
from typing import Optional

from chat_common.constants import DEFAULT_PORT, DEFAULT_SERVER_HOST, LOG_LEVELS, MAX_INPUT_LINE
from chat_server.chat.registry import ClientRegistry
from chat_server.chat.router import MessageRouter
from chat_server.chat.session import ChatSession
from chat_server.utils.config import ServerConfig
from chat_server.utils.logger import logger


class ChatServerApp:
    """Listener that owns the registry and spawns a session per connection."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.registry = ClientRegistry()
        self.router = MessageRouter(self.registry)
        self.server: Optional[asyncio.AbstractServer] = None

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        session = ChatSession(reader, writer, self.registry, self.router)
        await session.run()

    async def listen(self) -> asyncio.AbstractServer:
        """Bind the listening socket. Raises OSError if the port cannot be bound."""
        self.server = await asyncio.start_server(
            self.handle_client, limit=MAX_INPUT_LINE, **self.config.get_connection_info()
        )
        addr = ', '.join(str(sock.getsockname()) for sock in self.server.sockets)
        logger.log_server_started(addr)
        return self.server

    def bound_port(self) -> int:
        """Port actually bound (useful when configured with port 0)."""
        return self.server.sockets[0].getsockname()[1]

    async def start(self):
        """Start the server and accept connections until the process is stopped."""
        server = await self.listen()
        async with server:
            await server.serve_forever()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Text Chat Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--log-level', type=str.upper, default='INFO', choices=LOG_LEVELS,
                        help='Console log level (default: INFO)')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = ServerConfig(host=args.host, port=args.port, log_level=args.log_level)
    logger.set_level(config.log_level)

    server = ChatServerApp(config)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.log_error("server startup", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
