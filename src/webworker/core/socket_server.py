"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted client
socket is wrapped in a Connection and handed to a callback; what happens
to it afterwards (a new thread, in our case) is the caller's business.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create the listening socket
    2. bind()      Reserve host:port
    3. listen()    Let the OS queue incoming connections
    4. accept()    Take one queued connection (new socket per client)
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── bound once at startup
                    └───────────┬───────────┘
                                │ accept()
            ┌───────────────────┼───────────────────┐
            ▼                   ▼                   ▼
     ┌─────────────┐     ┌─────────────┐     ┌─────────────┐
     │ Connection  │     │ Connection  │     │ Connection  │
     │ (client A)  │     │ (client B)  │     │ (client C)  │
     └─────────────┘     └─────────────┘     └─────────────┘

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() would block forever, so the listening socket gets a 1 second
timeout. Each timeout is a chance to notice that shutdown() was called:

    while running:
        try:
            accept()        # at most 1 second
        except timeout:
            continue        # re-check running

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import WorkerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_TIMEOUT = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: WorkerConfig):
        """
        Args:
            config: Provides host, port, backlog and read_timeout.

        The socket is not created until start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        # Set once the socket is listening, for callers in other threads
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Before start() this is the configured address. Afterwards it is
        the real one, which differs when port 0 was requested.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" on restart while old sockets
        # sit in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_TIMEOUT)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into a graceful shutdown.

        signal.signal() only works on the main thread; when the server
        runs elsewhere (tests, embedding) the handlers are skipped and
        shutdown() must be called directly.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each new Connection, on the
                                accept thread. It must not block.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                read_timeout=self.config.read_timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop. Idempotent and callable from any thread.
        """
        if not self._shutdown_event.is_set():
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Returns:
            True if the server is ready, False on timeout.
        """
        return self._ready_event.wait(timeout)
