"""
=============================================================================
HTTP REQUEST READING
=============================================================================

Pulls the requested resource path out of an incoming HTTP request.

=============================================================================
WHAT WE ACTUALLY NEED FROM A REQUEST
=============================================================================

A full HTTP request carries a method, a target, a version, headers and
maybe a body. This worker only serves files for GET, so the only part
that matters is the second token of the first line:

    GET /images/cat.png HTTP/1.1\r\n      ← request line
    Host: localhost:8080\r\n              ← ignored
    User-Agent: curl/8.0\r\n              ← ignored
    \r\n                                  ← end of header block

        first line.split()  →  ["GET", "/images/cat.png", "HTTP/1.1"]
                                        │
                                        └── strip one "/" → "images/cat.png"

The remaining lines are read and thrown away so the client sees its
request fully consumed before the response starts.

=============================================================================
FAILURE IS NOT FATAL
=============================================================================

A client can disconnect, stall, or send garbage. None of that is allowed
to escape from read(): the reader stops and returns whatever path it had
already captured (possibly None). The worker then answers with a 404 for
a missing path, the same as for any other missing file.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class MalformedLineError(ValueError):
    """A request line could not be understood."""


@dataclass(frozen=True)
class Request:
    """
    The parts of an HTTP request this worker cares about.

    Attributes:
        path: Resource path with one leading "/" removed, or None when
              no GET request line was recognized.
        request_line: The first line as received (for access logs).
        lines_read: Number of lines consumed, header terminator included.
    """

    path: Optional[str] = None
    request_line: str = ""
    lines_read: int = 0


class RequestReader:
    """
    Reads one HTTP request header block from a binary stream.

    Usage:
        reader = RequestReader()
        request = reader.read(conn.rfile)
        request.path    # "index.html"
    """

    def __init__(self, charset: str = "utf-8", max_line_length: int = 8192):
        """
        Args:
            charset: Encoding used to decode request lines.
            max_line_length: Longest line accepted, in bytes.
        """
        self.charset = charset
        self.max_line_length = max_line_length

    def read(self, stream: BinaryIO) -> Request:
        """
        Read lines until the blank line that ends the header block.

        The stream is expected to enforce its own read timeout (a socket
        file with settimeout() applied). A timeout surfaces as OSError
        and ends reading like any other I/O failure.

        Args:
            stream: Binary file-like object supporting readline().

        Returns:
            The parsed Request. Never raises for I/O or parse problems.
        """
        path: Optional[str] = None
        request_line = ""
        lines_read = 0

        while True:
            try:
                line = self._read_line(stream)
            except OSError as e:
                logger.warning(f"Request error: {e}")
                break
            except (MalformedLineError, UnicodeDecodeError) as e:
                logger.debug(f"Malformed request line: {e}")
                break

            if line is None:
                # EOF before the blank line
                break

            lines_read += 1
            logger.debug(f"Request line: ({line})")

            if lines_read == 1:
                request_line = line
                try:
                    path = self.parse_request_line(line)
                except MalformedLineError as e:
                    logger.debug(f"Malformed request line: {e}")
                    break

            if not line:
                break

        return Request(path=path, request_line=request_line, lines_read=lines_read)

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read and decode one line, without its terminator.

        Returns:
            The decoded line, or None at end of stream.

        Raises:
            MalformedLineError: If the line exceeds max_line_length.
        """
        raw = stream.readline(self.max_line_length + 1)
        if not raw:
            return None

        if len(raw) > self.max_line_length:
            raise MalformedLineError(f"Line longer than {self.max_line_length} bytes")

        return raw.decode(self.charset).rstrip("\r\n")

    @staticmethod
    def parse_request_line(line: str) -> Optional[str]:
        """
        Extract the resource path from a request line.

        Examples:
            >>> RequestReader.parse_request_line("GET /index.html HTTP/1.1")
            'index.html'

            >>> RequestReader.parse_request_line("POST /form HTTP/1.1") is None
            True

        Returns:
            The path with exactly one leading "/" stripped, or None if
            the method token does not contain "GET". An empty line
            also yields None.

        Raises:
            MalformedLineError: If a GET line has no target token.
        """
        tokens = line.split()
        if not tokens or "GET" not in tokens[0]:
            return None

        if len(tokens) < 2:
            raise MalformedLineError(f"No request target in {line!r}")

        target = tokens[1]
        if target.startswith("/"):
            target = target[1:]
        return target
