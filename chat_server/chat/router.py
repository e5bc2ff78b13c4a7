"""
Message router.

Decides how a line from a registered client is delivered (to everyone, or
privately to one user) and formats the timestamped output lines.
"""

from chat_common.protocol_definitions import (
    PRIVATE_FORMAT_ERROR, SELF_MESSAGE_ERROR,
    create_user_not_found_notice, current_timestamp,
    format_private_from, format_private_to, format_public_message,
    parse_private_command
)
from chat_server.chat.registry import ClientRegistry
from chat_server.chat.sink import ClientSink
from chat_server.utils.logger import logger


class MessageRouter:
    """Stateless delivery logic on top of the client registry."""

    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    async def deliver(self, sink: ClientSink, line: str) -> bool:
        """Send one line to one sink. A failing sink is logged, not raised."""
        try:
            await sink.send_line(line)
            return True
        except OSError as e:
            logger.warning(f"Failed to deliver to {sink.peer}: {e}")
            return False

    async def announce(self, text: str) -> int:
        """
        Send a line to every registered client.

        Returns the number of clients the line was delivered to.
        """
        delivered = 0
        for sink in await self.registry.snapshot_sinks():
            if await self.deliver(sink, text):
                delivered += 1
        return delivered

    async def broadcast(self, sender: str, text: str) -> int:
        """Format a public message from ``sender`` and send it to everyone, sender included."""
        formatted = format_public_message(current_timestamp(), sender, text)
        logger.log_public(formatted)
        return await self.announce(formatted)

    async def notify(self, name: str, text: str) -> bool:
        """Send a notice to the user registered as ``name`` only."""
        sink = await self.registry.lookup(name)
        if sink is None:
            return False
        return await self.deliver(sink, text)

    async def private_message(self, sender: str, line: str) -> bool:
        """
        Handle a ``/msg <target> <body>`` line from ``sender``.

        Errors (bad format, unknown target, messaging yourself) are reported
        to the sender alone. On success the target gets the message and the
        sender gets a confirmation carrying the same timestamp. Returns True
        when the message reached the target.
        """
        command = parse_private_command(line)
        if command is None:
            await self.notify(sender, PRIVATE_FORMAT_ERROR)
            return False

        target_sink = await self.registry.lookup(command.target)
        if target_sink is None:
            await self.notify(sender, create_user_not_found_notice(command.target))
            return False

        if command.target == sender:
            await self.notify(sender, SELF_MESSAGE_ERROR)
            return False

        timestamp = current_timestamp()
        delivered = await self.deliver(target_sink, format_private_from(timestamp, sender, command.body))
        await self.notify(sender, format_private_to(timestamp, command.target, command.body))
        logger.log_private(sender, command.target)
        return delivered
