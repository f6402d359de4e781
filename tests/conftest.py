"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import WebServer, WorkerConfig
from webworker.http import LocalFileSystem, ResponseWriter


FIXED_NOW = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
FIXED_DATE = "Thu, 15 Jan 2026 12:30:45 GMT"
SERVER_NAME = "Test Server"

# Not valid UTF-8, so a text round trip would corrupt them
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe\x00\x01"
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00;"


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """Document root with one file of every served type."""
    (tmp_path / "index.html").write_text("Hello <cs371server> on <cs371date>")
    (tmp_path / "logo.png").write_bytes(PNG_BYTES)
    (tmp_path / "anim.gif").write_bytes(GIF_BYTES)
    (tmp_path / "photo.jpg").write_bytes(b"\xff\xd8\xff\xe0JFIF\x00\xff\xd9")
    (tmp_path / "photo.jpeg").write_bytes(b"\xff\xd8\xff\xdbjpeg\x00\xff\xd9")
    (tmp_path / "favicon.ico").write_bytes(b"\x00\x00\x01\x00\x01\x00\x10\x10")
    (tmp_path / "notes.txt").write_text("plain text")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "page.html").write_text(
        "<p><cs371date></p><p><cs371date></p><p><cs371server></p>"
    )
    return tmp_path


@pytest.fixture
def fixed_date() -> str:
    """The formatted form of FIXED_NOW."""
    return FIXED_DATE


@pytest.fixture
def server_name() -> str:
    return SERVER_NAME


@pytest.fixture
def filesystem(docroot: Path) -> LocalFileSystem:
    return LocalFileSystem(docroot)


@pytest.fixture
def writer(filesystem: LocalFileSystem) -> ResponseWriter:
    """ResponseWriter with a fixed clock."""
    return ResponseWriter(filesystem, server_name=SERVER_NAME, clock=lambda: FIXED_NOW)


@pytest.fixture
def config(docroot: Path) -> WorkerConfig:
    """Test configuration rooted at the temporary document root."""
    return WorkerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(docroot),
        server_name=SERVER_NAME,
        read_timeout=2.0,
        log_level="WARNING",
    )


class TestServer:
    """Runs a WebServer on a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: WorkerConfig) -> Generator[TestServer, None, None]:
    """A live server on a free port serving the docroot fixture."""
    srv = TestServer(WebServer(config))
    srv.start()

    yield srv

    srv.stop()
