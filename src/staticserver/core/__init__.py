"""
Core networking components: the accept loop and the per-client
connection wrapper.
"""

from .connection import Connection, ConnectionState, LineTooLongError
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "LineTooLongError",
    "SocketServer",
]
