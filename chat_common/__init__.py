"""
Common package for the text chat server and terminal client.

Contains the wire-level strings, line formatters and constants shared by
both sides of the connection.
"""
