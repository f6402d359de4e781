"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m webworker [options]

    python -m webworker                         # Serve . on 127.0.0.1:8080
    python -m webworker --port 3000             # Custom port
    python -m webworker --root ./www            # Serve another directory
    python -m webworker --server-name "Mine"    # Server header / template

Environment variables (WEBWORKER_*) provide the defaults; flags win.

=============================================================================
"""

import argparse
import dataclasses
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .config import WorkerConfig
from .server import WebServer


def build_parser(defaults: WorkerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Minimal thread-per-connection HTTP file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                       # Run with defaults
  python -m webworker --port 3000           # Custom port
  python -m webworker --host 0.0.0.0        # Listen on all interfaces
  python -m webworker --root ./public       # Serve files from ./public
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--read-timeout", "-t",
        type=float,
        default=defaults.read_timeout,
        help=f"Seconds to wait for a request (default: {defaults.read_timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help=f"Directory to serve files from (default: {defaults.document_root})"
    )

    parser.add_argument(
        "--server-name", "-n",
        default=defaults.server_name,
        help="Server header value and <cs371server> replacement"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        defaults = WorkerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment: {e}", file=sys.stderr)
        return 1

    args = build_parser(defaults).parse_args(argv)

    config = dataclasses.replace(
        defaults,
        host=args.host,
        port=args.port,
        read_timeout=args.read_timeout,
        document_root=args.root,
        server_name=args.server_name,
        log_level=args.log_level,
    )

    if not os.path.isdir(config.document_root):
        print(f"Error: not a directory: {config.document_root}", file=sys.stderr)
        return 1

    try:
        server = WebServer(config)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
