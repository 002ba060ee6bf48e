"""
=============================================================================
CORE NETWORKING MODULE
=============================================================================

The transport layer under the HTTP server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ── accept() ──► Connection ──► HTTPServer thread      │
    │   (listening socket)          (one client)    (one per connection)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Listening socket and accept loop
    "Connection",       # One client socket: reads, deadline, close
    "ConnectionState",  # Lifecycle states of a Connection
]
