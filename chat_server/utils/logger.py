"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging

from chat_common.constants import LOG_FORMAT, LOG_DATE_FORMAT


class ServerLogger:
    """Server logging class."""
    
    def __init__(self, log_level: int = logging.INFO):
        # Set up main logger
        self.logger = logging.getLogger('chat_server')
        self.logger.setLevel(log_level)
        
        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
        
        # Create console handler
        self.console_handler = logging.StreamHandler()
        self.console_handler.setLevel(log_level)
        self.console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        
        self.logger.addHandler(self.console_handler)
    
    def set_level(self, level):
        """Change the level of the logger and its console handler."""
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
        self.logger.setLevel(level)
        self.console_handler.setLevel(level)
    
    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)
    
    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)
    
    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)
    
    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)
    
    def log_server_started(self, addr: str):
        self.info(f"Server started on {addr}")
    
    def log_connection(self, addr):
        """Log client connection."""
        self.info(f"New connection from {addr}")
    
    def log_rejection(self, addr, name: str, reason: str):
        """Log a refused registration attempt."""
        self.info(f"Rejected name {name!r} from {addr}: {reason}")
    
    def log_join(self, name: str, addr):
        """Log user joining the chat."""
        self.info(f"{name} присоединился к чату. ({addr})")
    
    def log_leave(self, name: str):
        """Log user leaving the chat."""
        self.info(f"{name} покинул чат.")
    
    def log_public(self, formatted: str):
        """Log a public message as it is broadcast."""
        self.info(f"Get {formatted}")
    
    def log_private(self, sender: str, target: str):
        """Log a private message delivery; the body is not logged."""
        self.info(f"Private message {sender} -> {target}")
    
    def log_disconnect(self, addr, name=None):
        """Log connection close."""
        who = name if name is not None else "unregistered client"
        self.debug(f"Connection from {addr} closed ({who})")
    
    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
