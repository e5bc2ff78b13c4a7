#!/usr/bin/env python3
"""
Text Chat Client - Main Entry Point

Usage:
    python main_client.py [--host HOST] [--port PORT]

The first line you type is sent as your name.
"""

if __name__ == "__main__":
    import sys

    from chat_client.main_client import main

    sys.exit(main())
