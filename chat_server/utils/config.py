"""
Server configuration module.

This module handles server-side configuration settings.
"""

from chat_common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT


class ServerConfig:
    """Server configuration class."""
    
    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT, log_level: str = 'INFO'):
        self.host = host
        self.port = port
        self.log_level = log_level
    
    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port
        }
