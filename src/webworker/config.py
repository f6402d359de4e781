"""
=============================================================================
WORKER CONFIGURATION
=============================================================================

Centralized, immutable configuration for the web worker and its driver.

=============================================================================
WHY FROZEN?
=============================================================================

Every connection runs in its own thread, and every thread receives the
same WorkerConfig instance. Freezing the dataclass means no worker can
change a value another worker is reading, so the config can be shared
without locks.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webworker --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBWORKER_PORT=3000 python -m webworker                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

To change a value on an existing config, use dataclasses.replace():

    config = replace(WorkerConfig.from_env(), port=9000)

=============================================================================
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


# =============================================================================
# CONTENT TYPE TABLE
# =============================================================================
#
# Extension (with dot, case-sensitive) → Content-Type header value.
# Files whose extension is not listed here are never served.
#
# =============================================================================

DEFAULT_CONTENT_TYPES: Mapping[str, str] = MappingProxyType({
    ".html": "text/html",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
})

DEFAULT_SERVER_NAME = "Jon's very own server"

# RFC 7231-style layout; %a and %b follow the active locale
DEFAULT_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


@dataclass(frozen=True)
class WorkerConfig:
    """
    Configuration shared by the server and every per-connection worker.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, read_timeout, max_line_length

    CONTENT SETTINGS
    - document_root, content_types, charset

    RESPONSE IDENTITY
    - server_name, date_format

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to."""

    port: int = 8080
    """
    The port number to listen on.
    0 lets the OS pick a free port (handy for tests).
    """

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    read_timeout: float = 10.0
    """
    Seconds to wait for request bytes before giving up on the read.
    A timeout ends the read quietly; the worker still answers.
    """

    max_line_length: int = 8192
    """Longest request/header line accepted, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """Directory that request paths are resolved against."""

    content_types: Mapping[str, str] = field(
        default_factory=lambda: DEFAULT_CONTENT_TYPES
    )
    """Extension → Content-Type. Lookups are case-sensitive."""

    charset: str = "utf-8"
    """Encoding for request lines and HTML templates."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = DEFAULT_SERVER_NAME
    """
    Value of the Server header, also substituted for <cs371server>
    in HTML documents.
    """

    date_format: str = DEFAULT_DATE_FORMAT
    """strftime pattern for the Date header and <cs371date>."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WorkerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST          Bind host (default: 127.0.0.1)
        WEBWORKER_PORT          Bind port (default: 8080)
        WEBWORKER_ROOT          Document root (default: .)
        WEBWORKER_SERVER_NAME   Server identity string
        WEBWORKER_READ_TIMEOUT  Request read timeout in seconds (default: 10)
        WEBWORKER_LOG_LEVEL     Logging level (default: INFO)

        =====================================================================

        Args:
            environ: Mapping to read from. Defaults to os.environ.
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("WEBWORKER_HOST", "127.0.0.1"),
            port=int(env.get("WEBWORKER_PORT", "8080")),
            document_root=env.get("WEBWORKER_ROOT", "."),
            server_name=env.get("WEBWORKER_SERVER_NAME", DEFAULT_SERVER_NAME),
            read_timeout=float(env.get("WEBWORKER_READ_TIMEOUT", "10")),
            log_level=env.get("WEBWORKER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead
        of inside a worker thread.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.max_line_length < 256:
            raise ValueError("max_line_length must be >= 256")

        if not self.server_name:
            raise ValueError("server_name must not be empty")

        for extension in self.content_types:
            if not extension.startswith("."):
                raise ValueError(f"Content type key must start with '.': {extension!r}")
