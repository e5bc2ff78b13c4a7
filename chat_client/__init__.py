"""
Client package for the text chat server.

A terminal client: prints what the server sends and forwards what the user types.
"""
