"""
Chat module for server-side messaging functionality.

Handles:
- Per-connection sessions
- Online user registry
- Broadcast and private message routing
"""
