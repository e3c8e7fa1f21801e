"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the preview server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SOCKET SERVER                                                      │
    │  • Binds HOST:PORT, fails with ServerStartError                     │
    │  • Runs the accept() loop on the calling thread                     │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ every accepted client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  THREAD POOL                                                        │
    │  • 16 worker threads                                                │
    │  • submit() blocks while all are busy (backpressure)                │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ one task per connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  CONNECTION                                                         │
    │  • Reads one request head, sends one response, closes               │
    │  • is_broken_pipe() classifies write failures                       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer, ServerStartError
from .connection import Connection, ConnectionState, is_broken_pipe
from .thread_pool import ThreadPool, DEFAULT_WORKERS

__all__ = [
    "SocketServer",
    "ServerStartError",
    "Connection",
    "ConnectionState",
    "is_broken_pipe",
    "ThreadPool",
    "DEFAULT_WORKERS",
]
