#!/usr/bin/env python3
"""
Text Chat Server - Main Entry Point

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           TCP port (default: 8080)
    --log-level LEVEL     DEBUG, INFO, WARNING or ERROR (default: INFO)
"""

if __name__ == "__main__":
    import sys

    from chat_server.main_server import main

    sys.exit(main())
