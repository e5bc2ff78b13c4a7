"""
Shared constants for the text chat server and client.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 8080

# Wire format
ENCODING = 'utf-8'
LINE_TERMINATOR = '\n'

# Commands
PRIVATE_MESSAGE_PREFIX = '/msg '

# Timestamps (server local time)
TIMESTAMP_FORMAT = '%H:%M:%S'

# Logging
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# Line limits
# Longest line the server accepts from a client (asyncio's default reader limit)
MAX_INPUT_LINE = 64 * 1024
# Server lines carry a timestamp, a name and a body, each bounded by MAX_INPUT_LINE
CLIENT_READ_LIMIT = 4 * MAX_INPUT_LINE

# Outbound buffering
MAX_PENDING_LINES = 1000  # per client; a client this far behind is disconnected
FLUSH_TIMEOUT = 2  # seconds to flush queued lines when a session ends
