"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket as a pair of buffered byte streams.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

recv() may hand back half a request line, or three lines at once. The
request reader wants whole lines, so instead of calling recv() directly
we ask the socket for a buffered file object:

    rfile = sock.makefile("rb")
    rfile.readline()        # blocks until "\n" or timeout

and for the response side:

    wfile = sock.makefile("wb")
    wfile.write(...)        # buffered
    wfile.flush()           # pushed to the kernel

=============================================================================
BOUNDED WAITING
=============================================================================

The socket carries a read timeout. A client that connects and never
sends anything makes readline() raise socket.timeout (an OSError) after
read_timeout seconds instead of pinning the worker thread forever.

=============================================================================
LIFECYCLE
=============================================================================

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED

One connection carries exactly one request. There is no keep-alive
state: after the response the connection is always closed.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


# Seconds to wait for the client to finish sending before close()
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging."""
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    An accepted client connection.

    Attributes:
        socket: The client socket. Owned exclusively by this connection.
        address: Client's (ip, port) tuple.
        read_timeout: Seconds a blocking read may wait for data.
        id: Short identifier for log lines.
        state: Current lifecycle state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]
    read_timeout: Optional[float] = 10.0

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    _rfile: Optional[BinaryIO] = field(default=None, repr=False)
    _wfile: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # settimeout() puts the socket in timeout mode; makefile() streams
        # inherit it, so readline() raises socket.timeout when it expires
        self.socket.settimeout(self.read_timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def rfile(self) -> BinaryIO:
        """Buffered input stream. Moves the connection to READING."""
        if self._rfile is None:
            self._rfile = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._rfile

    @property
    def wfile(self) -> BinaryIO:
        """Buffered output stream. Moves the connection to WRITING."""
        if self._wfile is None:
            self._wfile = self.socket.makefile("wb")
        self.state = ConnectionState.WRITING
        return self._wfile

    def close(self):
        """
        Flush pending output and close the socket.

        Safe to call more than once. Errors while closing are logged at
        DEBUG: the peer may already be gone, and there is nothing left
        to send it.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        for stream in (self._wfile, self._rfile):
            if stream is None:
                continue
            try:
                stream.close()  # flushes wfile
            except OSError as e:
                logger.debug(f"[{self.id}] Stream close failed: {e}")

        try:
            # Send FIN so the client sees end-of-body
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            # Closing with unread request bytes in the kernel buffer makes
            # the OS send RST, which can discard the response in flight
            self.socket.settimeout(DRAIN_TIMEOUT)
            deadline = time.monotonic() + DRAIN_TIMEOUT
            while time.monotonic() < deadline and self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
