"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read the request head, send one
response, close.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

recv() returns whatever bytes have arrived, not whole messages:

    Client sends:   "GET /docs/guide HTTP/1.1\r\nHost: x\r\n\r\n"

    Server may get: recv() → "GET /docs/gu"
                    recv() → "ide HTTP/1.1\r\nHost: x\r\n\r\n"

So reading buffers until the blank line (\r\n\r\n) that ends the head.
The preview server never needs a request body, so reading stops there.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED
              │                        ▲
              └── peer closed early ───┘

Every response carries "Connection: close". There is no keep-alive loop and
no read timeout: a client that stalls keeps its worker busy until it goes
away.

=============================================================================
CLASSIFYING WRITE FAILURES
=============================================================================

    BrokenPipeError / EPIPE   The peer already hung up. Expected, silent.
    any other OSError         A genuine fault. Logged by the caller.

is_broken_pipe() makes that decision from the error itself.

=============================================================================
"""

import errno
import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


# Upper bounds for draining unread client bytes in close()
DRAIN_LIMIT = 64 * 1024
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"              # Just accepted
    READING = "reading"      # Reading the request head
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


def is_broken_pipe(error: OSError) -> bool:
    """
    Check whether a write failed because the peer already disconnected.

    Args:
        error: The OSError raised while responding.

    Returns:
        True for broken pipe (EPIPE), False for every other failure.
    """
    return isinstance(error, BrokenPipeError) or error.errno == errno.EPIPE


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's address tuple as returned by accept().
        id: Short identifier for log lines.
        state: Current ConnectionState.
        created_at: Time the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    max_head_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Blocking with no timeout: workers wait on slow clients indefinitely
        self.socket.settimeout(None)

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one request head from the socket.

        Returns:
            Bytes up to and including the terminating blank line.
            None if the client closed the connection before sending a
            complete head.

            If the head outgrows max_head_size, the bytes read so far are
            returned as-is; the parser rejects them as oversized.
        """
        self.state = ConnectionState.READING

        while b"\r\n\r\n" not in self._buffer:
            chunk = self._recv()
            if not chunk:
                return None

            self._buffer += chunk
            if len(self._buffer) > self.max_head_size:
                data, self._buffer = self._buffer, b""
                return data

        head_end = self._buffer.find(b"\r\n\r\n") + 4
        data, self._buffer = self._buffer[:head_end], self._buffer[head_end:]
        return data

    def _recv(self) -> bytes:
        """Receive a chunk; an abrupt disconnect reads as end-of-stream."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send the complete response.

        sendall() blocks until every byte is handed to the kernel.

        Raises:
            OSError: On any write failure. Callers classify it with
                     is_broken_pipe().
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        1. shutdown(SHUT_WR) sends FIN after the response.
        2. Drain what the client still sends, so unread request bytes do
           not turn the close into a reset that destroys the response.
           At most DRAIN_LIMIT bytes, for at most DRAIN_TIMEOUT seconds.
        3. close() releases the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break

                self.socket.settimeout(remaining)
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # includes socket.timeout

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
