"""
=============================================================================
WEBWORKER - A Minimal Per-Connection HTTP File Server
=============================================================================

Serves HTML pages and images from a directory over raw sockets. Every
connection is handled by its own worker thread, which:

    1. reads one HTTP request and takes the path from its first line
    2. maps the path to a file and a content type
    3. writes a short HTTP/1.1 header block and the file
    4. closes the connection

HTML files get two tokens filled in on the way out:

    <cs371date>     current date (GMT)
    <cs371server>   server identity string

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── config.py            # WorkerConfig frozen dataclass
    ├── server.py            # WebServer: accept loop + thread per connection
    ├── worker.py            # WebWorker: one request/response cycle
    ├── core/
    │   ├── socket_server.py # TCP listening socket and accept loop
    │   └── connection.py    # Client socket wrapper
    └── http/
        ├── request.py       # RequestReader
        ├── resource.py      # ResourceResolver, LocalFileSystem
        ├── response.py      # ResponseWriter, templating
        ├── status_codes.py  # 200 / 404
        └── mime_types.py    # Extension → content type

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, WorkerConfig

    WebServer(WorkerConfig(port=8080, document_root="./www")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import WorkerConfig
from .server import WebServer
from .worker import WebWorker

__all__ = ["WebServer", "WebWorker", "WorkerConfig", "__version__"]
