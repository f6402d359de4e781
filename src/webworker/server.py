"""
=============================================================================
WEB SERVER
=============================================================================

Glues the pieces together: configuration, logging, the TCP accept loop,
and one WebWorker thread per accepted connection.

    ┌──────────────┐  Connection   ┌──────────────────────────────────────┐
    │ SocketServer │ ────────────► │ threading.Thread(WebWorker(...).run) │
    │ accept loop  │               └──────────────────────────────────────┘
    └──────────────┘                      (one per connection)

=============================================================================
WHY A THREAD PER CONNECTION?
=============================================================================

Every connection carries exactly one short request, so a dedicated
thread is the simplest model that keeps a slow client from blocking
everyone else. Worker threads are daemons: stopping the server stops
accepting new connections and does not wait for stragglers, whose
reads are bounded by read_timeout anyway.

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import WorkerConfig
from .core import Connection, SocketServer
from .worker import WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    Multi-threaded static web server.

    Usage:
        server = WebServer(WorkerConfig(port=8080, document_root="./www"))
        server.run()   # Blocks until Ctrl+C or shutdown()
    """

    def __init__(self, config: Optional[WorkerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or WorkerConfig()
        self.config.validate()  # Fail fast, before any socket exists

        self._socket_server = SocketServer(self.config)

    @property
    def address(self):
        """The (host, port) the server is listening on."""
        return self._socket_server.address

    def run(self, configure_logging: bool = True):
        """
        Start serving (blocking).

        Args:
            configure_logging: Install a basic root handler. Pass False
                               when the application has its own setup.
        """
        if configure_logging:
            self._setup_logging()

        logger.info(
            f"Serving {self.config.document_root} as "
            f"{self.config.server_name!r} on {self.config.host}:{self.config.port}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Callable from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a new connection.

        Called on the accept thread, so it only spawns and returns.
        """
        worker = WebWorker(conn, self.config)
        thread = threading.Thread(
            target=worker.run,
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        thread.start()
