"""
Protocol definitions for the text chat server.

This module defines every line the server sends to a client and the parsing
of the one structured command clients can send (``/msg``).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from chat_common.constants import (
    ENCODING, LINE_TERMINATOR, PRIVATE_MESSAGE_PREFIX, TIMESTAMP_FORMAT
)


@dataclass
class PrivateCommand:
    """Parsed ``/msg <target> <body>`` command."""
    target: str
    body: str


# Registration
NAME_PROMPT = "Введите ваше имя:"
INVALID_NAME_NOTICE = "--- Имя не может быть пустым или содержать пробелы. ---"
NAME_TAKEN_NOTICE = "--- Это имя уже занято. Попробуйте другое. ---"
USAGE_HINT = "--- Для личного сообщения введите: /msg <имя_получателя> <сообщение> ---"

# Private message errors
PRIVATE_FORMAT_ERROR = "--- Ошибка: неверный формат. Используйте: /msg <имя> <сообщение> ---"
SELF_MESSAGE_ERROR = "--- Нельзя отправить личное сообщение самому себе. ---"

# Client side
CONNECTION_LOST_NOTICE = "--- Соединение с сервером потеряно. ---"


def current_timestamp() -> str:
    """Return the server-local wall-clock time as HH:MM:SS."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def is_valid_name(name: str) -> bool:
    """A display name must be non-empty and contain no whitespace."""
    return bool(name) and not any(ch.isspace() for ch in name)


def is_blank(line: str) -> bool:
    return not line.strip()


def create_welcome_lines(name: str) -> List[str]:
    """Create the welcome notice followed by the ``/msg`` usage hint."""
    return [
        f"--- Добро пожаловать в чат, {name}! ---",
        USAGE_HINT,
    ]


def create_user_joined_notice(name: str) -> str:
    return f"--- {name} присоединился к чату. ---"


def create_user_left_notice(name: str) -> str:
    return f"--- {name} покинул чат. ---"


def create_user_not_found_notice(target: str) -> str:
    return f"--- Ошибка: пользователь '{target}' не найден. ---"


def create_connect_failed_notice(reason) -> str:
    return f"Не удалось подключиться к серверу: {reason}"


def format_public_message(timestamp: str, sender: str, text: str) -> str:
    """Format a broadcast line as ``[HH:MM:SS] [sender]: text``."""
    return f"[{timestamp}] [{sender}]: {text}"


def format_private_from(timestamp: str, sender: str, body: str) -> str:
    """Format a private message as seen by its recipient."""
    return f"[{timestamp}] [ЛС от {sender}]: {body}"


def format_private_to(timestamp: str, target: str, body: str) -> str:
    """Format the delivery confirmation shown to the sender of a private message."""
    return f"[{timestamp}] [ЛС для {target}]: {body}"


def is_private_command(line: str) -> bool:
    return line.startswith(PRIVATE_MESSAGE_PREFIX)


def parse_private_command(line: str) -> Optional[PrivateCommand]:
    """
    Split ``/msg <target> <body>`` into its target and body.

    The body is everything after the target and may itself contain
    whitespace. Returns None when fewer than three fields are present.
    """
    parts = line.split(None, 2)
    if len(parts) < 3:
        return None
    return PrivateCommand(target=parts[1], body=parts[2])


def encode_line(text: str) -> bytes:
    """Encode one outgoing line for the wire."""
    return (text + LINE_TERMINATOR).encode(ENCODING)


def decode_line(data: bytes) -> str:
    """Decode one incoming line, dropping its ``\\n`` or ``\\r\\n`` terminator."""
    text = data.decode(ENCODING, errors='replace')
    if text.endswith(LINE_TERMINATOR):
        text = text[:-1]
    if text.endswith('\r'):
        text = text[:-1]
    return text
