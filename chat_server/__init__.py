"""
Server package for the text chat server.

This package contains all server-side functionality including:
- Client connection management
- Name registration and the online registry
- Broadcast and private message routing
- Configuration and utilities
"""
