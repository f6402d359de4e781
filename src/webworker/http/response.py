"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Writes the status line, headers and body for one resolved resource.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RESPONSE AS SENT ON THE WIRE                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200\n                         ← status line (code only) │
    │    Date: Mon, 19 Oct 2026 14:03:11 GMT\n                            │
    │    Server: Jon's very own server\n                                  │
    │    Connection: close\n                                              │
    │    Content-Type: text/html\n                                        │
    │    \n                                     ← end of header block     │
    │    <html>...</html>                       ← body                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Header order is fixed and every line ends with a bare "\n".

=============================================================================
HOW DOES THE CLIENT KNOW WHERE THE BODY ENDS?
=============================================================================

There is deliberately NO Content-Length header. Every response says
"Connection: close", and the worker closes the socket after the body,
so the client reads until EOF. Adding Content-Length would only make
sense together with keep-alive support, which this server does not do.

=============================================================================
HTML TEMPLATES
=============================================================================

HTML files may contain two tokens that are replaced on every request:

    <cs371date>     → the same date string sent in the Date header
    <cs371server>   → the server identity string

The substitution is whole-document: the file is read into memory,
both tokens are replaced everywhere, and the result is written in one go.
Images are copied byte for byte with no processing.

=============================================================================
"""

import logging
import shutil
from datetime import datetime, timezone
from typing import BinaryIO, Callable

from .mime_types import HTML_TYPE, is_template_type
from .resource import Found, LocalFileSystem, Resource
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


DATE_TOKEN = "<cs371date>"
SERVER_TOKEN = "<cs371server>"

HTTP_VERSION = "HTTP/1.1"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_date(dt: datetime, date_format: str = "%a, %d %b %Y %H:%M:%S GMT") -> str:
    """
    Format a datetime in GMT.

    strftime's %a/%b/%c honour the process locale, so the output is
    locale-aware while the timezone is always forced to GMT.

    Args:
        dt: Datetime to format. Naive values are taken as UTC.
        date_format: strftime pattern.

    Returns:
        Formatted date string.

    Example:
        >>> format_date(datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc))
        'Thu, 15 Jan 2026 12:30:45 GMT'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(date_format)


def render_template(text: str, date: str, server_name: str) -> str:
    """
    Replace every date and server token in an HTML document.

    Example:
        >>> render_template("Hello <cs371server> on <cs371date>", "today", "srv")
        'Hello srv on today'
    """
    return text.replace(DATE_TOKEN, date).replace(SERVER_TOKEN, server_name)


class ResponseWriter:
    """
    Writes a complete response for a resolved resource.

    =========================================================================
    CONTRACT
    =========================================================================

    - write() is called exactly once per connection, after reading ends.
    - It writes the header block, then the body, then flushes.
    - I/O errors are NOT handled here; they propagate to the worker,
      which logs them and abandons the connection.

    =========================================================================
    USAGE
    =========================================================================

        writer = ResponseWriter(filesystem, server_name="My Server")
        writer.write(conn.wfile, resource)

    =========================================================================
    """

    def __init__(
        self,
        filesystem: LocalFileSystem,
        server_name: str,
        date_format: str = "%a, %d %b %Y %H:%M:%S GMT",
        charset: str = "utf-8",
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            filesystem: Where Found resources are read from.
            server_name: Server header value and <cs371server> replacement.
            date_format: strftime pattern for the Date header.
            charset: Encoding of HTML files and of the response text.
            clock: Returns the current time. Tests pass a fixed clock.
        """
        self.filesystem = filesystem
        self.server_name = server_name
        self.date_format = date_format
        self.charset = charset
        self.clock = clock

    def write(self, stream: BinaryIO, resource: Resource) -> HTTPStatus:
        """
        Write the response for resource to stream.

        Args:
            stream: Binary writable stream (the connection's output side).
            resource: Result of ResourceResolver.resolve().

        Returns:
            The status code that was sent.
        """
        date = format_date(self.clock(), self.date_format)

        if isinstance(resource, Found):
            status = HTTPStatus.OK
            content_type = resource.content_type
        else:
            status = HTTPStatus.NOT_FOUND
            content_type = HTML_TYPE

        # ─────────────────────────────────────────────────────────────────
        # HEADER BLOCK
        # ─────────────────────────────────────────────────────────────────
        stream.write(self.header_block(status, content_type, date))

        # ─────────────────────────────────────────────────────────────────
        # BODY
        # ─────────────────────────────────────────────────────────────────
        if not isinstance(resource, Found):
            stream.write(f"{int(status)} {status.phrase}".encode("ascii"))
        elif is_template_type(resource.content_type):
            self._write_html(stream, resource, date)
        else:
            self._write_raw(stream, resource)

        stream.flush()
        return status

    def header_block(self, status: HTTPStatus, content_type: str, date: str) -> bytes:
        """Build the status line and headers, ending with the blank line."""
        lines = [
            f"{HTTP_VERSION} {int(status)}",
            f"Date: {date}",
            f"Server: {self.server_name}",
            "Connection: close",
            f"Content-Type: {content_type}",
            "",
            "",
        ]
        return "\n".join(lines).encode(self.charset)

    def _write_html(self, stream: BinaryIO, resource: Found, date: str):
        with self.filesystem.open_for_read(resource.path) as f:
            # surrogateescape round-trips bytes that are not valid in charset
            text = f.read().decode(self.charset, errors="surrogateescape")

        body = render_template(text, date, self.server_name)
        stream.write(body.encode(self.charset, errors="surrogateescape"))

    def _write_raw(self, stream: BinaryIO, resource: Found):
        with self.filesystem.open_for_read(resource.path) as f:
            shutil.copyfileobj(f, stream)
