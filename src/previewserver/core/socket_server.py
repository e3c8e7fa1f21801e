"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, and the accept loop that hands
every new client to a callback.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create the listening socket (AF_INET or AF_INET6,
                   depending on the bind address)
    2. bind()      Reserve HOST:PORT
                   └─ fails with ServerStartError: port in use,
                      permission denied, address not available
    3. listen()    Let the kernel queue incoming connections
    4. accept()    Loop: wait for a client, wrap it, hand it off

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── created once by bind()
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    Connection 1            Connection 2            Connection 3
        │                       │                       │
        └──────────► connection_handler(conn) ◄─────────┘
                     (submits to the thread pool, may block)

bind() and serve() are separate steps so the caller can announce the
bound address between them, and so a failed bind surfaces before the
accept loop exists.

=============================================================================
NO GRACEFUL SHUTDOWN
=============================================================================

The accept loop runs until the process exits. No signal handlers are
installed: Ctrl+C raises KeyboardInterrupt out of accept() in the main
thread. shutdown() only exists so tests and embedders running the loop on
a background thread can stop it; accept() wakes once per second to notice.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


LISTEN_BACKLOG = 128


class ServerStartError(OSError):
    """Raised when the listening socket cannot be bound."""


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind()                    # raises ServerStartError
        print(server.bound_address)
        server.serve(handle_connection)  # blocks
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host and port are used).

        No socket is created until bind().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._shutdown_event = threading.Event()

    @property
    def bound_address(self) -> Tuple[str, int]:
        """
        The (host, port) actually bound.

        Differs from the configured address when port 0 was requested.
        """
        if self._socket is None:
            return (self.config.host, self.config.port)
        sockname = self._socket.getsockname()
        return (sockname[0], sockname[1])

    def _create_socket(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)

        # SO_REUSEADDR: rebind right after a restart (TIME_WAIT).
        # Still refuses a port another process is listening on.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: send each response without Nagle's delay
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up once a second so shutdown() is noticed
        sock.settimeout(1.0)

        return sock

    def bind(self):
        """
        Create, bind and start listening.

        Raises:
            ServerStartError: If the address cannot be bound.
        """
        sock = self._create_socket()

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(LISTEN_BACKLOG)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.bind_address}: {e}")
            raise ServerStartError(
                e.errno, f"could not bind {self.config.bind_address}: {e.strerror or e}"
            ) from e

        self._socket = sock
        logger.debug(f"Listening on {self.bound_address[0]}:{self.bound_address[1]}")

    def serve(self, connection_handler: Callable[[Connection], None]):
        """
        Run the accept loop. Blocks until shutdown() or process exit.

        Args:
            connection_handler: Called on the accepting thread for every
                                new Connection. May block (backpressure).
        """
        if self._socket is None:
            self.bind()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while not self._shutdown_event.is_set():
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._shutdown_event.is_set():
                    break
                # Per-connection accept failures (EMFILE, ECONNABORTED...)
                # do not end the loop
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(socket=client_socket, address=client_address)
            connection_handler(conn)

    def shutdown(self):
        """Stop the accept loop. Safe to call more than once."""
        self._shutdown_event.set()

    def _cleanup(self):
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.debug("Socket server stopped")
