"""
=============================================================================
WEB WORKER
=============================================================================

Handles exactly one client connection, from first byte to close.

=============================================================================
ONE CONNECTION, ONE WORKER
=============================================================================

Each accepted connection gets its own thread running a WebWorker. The
worker owns the socket end-to-end, so the code below only ever has to
think about a single client:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        WebWorker.run()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RequestReader.read(conn.rfile)     → Request(path)             │
    │   2. ResourceResolver.resolve(path)     → Found | NotFound          │
    │   3. ResponseWriter.write(conn.wfile)   → header + body             │
    │   4. conn.close()                       (always)                    │
    │   5. access log line                                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Workers share nothing but the frozen WorkerConfig.

=============================================================================
FAILURE ISOLATION
=============================================================================

The unit of failure is one connection. Reading never raises (see
RequestReader). Anything raised while resolving or writing, such as a
broken pipe halfway through an image, is logged here and the connection
is dropped. No retry and no second response.

=============================================================================
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .config import WorkerConfig
from .core.connection import Connection
from .http.request import Request, RequestReader
from .http.resource import LocalFileSystem, ResourceResolver
from .http.response import ResponseWriter
from .http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

access_logger = logging.getLogger("webworker.access")


@dataclass
class AccessLog:
    """
    One access log entry per connection.

    status is None when the response could not be written.
    """

    client_ip: str
    request_line: str
    status: Optional[int]
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        """Common-log-style line."""
        status = self.status if self.status is not None else "-"
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {status} {self.duration_ms:.2f}ms'
        )


class WebWorker:
    """
    Serves one request on one connection.

    Usage:
        worker = WebWorker(conn, config)
        threading.Thread(target=worker.run, daemon=True).start()
    """

    def __init__(
        self,
        connection: Connection,
        config: WorkerConfig,
        reader: Optional[RequestReader] = None,
        resolver: Optional[ResourceResolver] = None,
        writer: Optional[ResponseWriter] = None,
    ):
        """
        Args:
            connection: An open client connection. The worker closes it.
            config: Shared, immutable configuration.
            reader, resolver, writer: Override the components built from
                config (used by tests).
        """
        self.connection = connection
        self.config = config

        filesystem = LocalFileSystem(config.document_root)

        self.reader = reader or RequestReader(
            charset=config.charset,
            max_line_length=config.max_line_length,
        )
        self.resolver = resolver or ResourceResolver(filesystem, config.content_types)
        self.writer = writer or ResponseWriter(
            filesystem,
            server_name=config.server_name,
            date_format=config.date_format,
            charset=config.charset,
        )

    def run(self) -> Optional[HTTPStatus]:
        """
        Handle the connection. Never raises.

        Returns:
            The status sent, or None if the response failed.
        """
        conn = self.connection
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")

        start = time.perf_counter()
        request = Request()
        status: Optional[HTTPStatus] = None

        try:
            with conn:
                request = self.reader.read(conn.rfile)
                resource = self.resolver.resolve(request.path)
                status = self.writer.write(conn.wfile, resource)
        except Exception as e:
            logger.exception(f"[{conn.id}] Output error: {e}")
            status = None

        duration_ms = (time.perf_counter() - start) * 1000
        self._log_access(request, status, duration_ms)

        logger.debug(f"[{conn.id}] Done handling connection")
        return status

    def _log_access(self, request: Request, status: Optional[HTTPStatus], duration_ms: float):
        entry = AccessLog(
            client_ip=self.connection.client_ip,
            request_line=request.request_line,
            status=int(status) if status is not None else None,
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S +0000"),
        )

        if status is None:
            access_logger.warning(entry.to_text())
        else:
            access_logger.info(entry.to_text())
