"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening TCP socket                                 │
    │  • Runs the accept() loop                                           │
    │  • Wraps each client socket in a Connection                         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one thread per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Buffered line reading with a bounded timeout                     │
    │  • Buffered writing                                                 │
    │  • Always closed after one response                                 │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wrapper for one client socket
    "ConnectionState",  # Lifecycle states
]
