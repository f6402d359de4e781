"""
=============================================================================
RESOURCE RESOLUTION
=============================================================================

Turns a requested path into either a servable file or "not found".

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     resolve(path) Decision Flow                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   path is None? ──────────────────────────────────► NotFound        │
    │        │                                                             │
    │   escapes document root? ─────────────────────────► NotFound        │
    │        │                                                             │
    │   not an existing file? ──────────────────────────► NotFound        │
    │        │                                                             │
    │   extension not in table? ────────────────────────► NotFound        │
    │        │                                                             │
    │        └──────────────────────► Found(content_type, path)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The path comes straight from the client. Without a check,

    GET /../../etc/passwd HTTP/1.1

would walk out of the document root. We resolve the joined path and
require it to stay under the resolved root:

    full_path = (root / user_input).resolve()
    full_path.relative_to(root)   # ValueError if outside

Escapes are answered with an ordinary 404 so the response does not
reveal whether the target exists.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Union

from ..config import DEFAULT_CONTENT_TYPES
from .mime_types import get_content_type


logger = logging.getLogger(__name__)


# =============================================================================
# FILESYSTEM CAPABILITY
# =============================================================================

class LocalFileSystem:
    """
    Read-only view of a directory tree.

    Every path handed to this class is relative to root. Paths that
    resolve outside root are treated as nonexistent.
    """

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root).resolve()

    def locate(self, path: str) -> Optional[Path]:
        """
        Map a relative path to an absolute one inside root.

        Returns:
            The resolved path, or None if it escapes root.
        """
        try:
            full_path = (self.root / path).resolve()
        except (OSError, ValueError) as e:
            # Embedded NUL bytes, symlink loops
            logger.debug(f"Unresolvable path {path!r}: {e}")
            return None

        try:
            full_path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {path}")
            return None
        return full_path

    def exists(self, path: str) -> bool:
        """True if path names a regular file inside root."""
        full_path = self.locate(path)
        if full_path is None:
            return False
        try:
            return full_path.is_file()
        except OSError as e:
            # ENAMETOOLONG and friends: nothing servable by that name
            logger.debug(f"Cannot stat {path!r}: {e}")
            return False

    def open_for_read(self, path: str) -> BinaryIO:
        """
        Open a file for binary reading.

        Raises:
            FileNotFoundError: If the path escapes root or does not exist.
        """
        full_path = self.locate(path)
        if full_path is None:
            raise FileNotFoundError(path)
        return full_path.open("rb")


# =============================================================================
# RESOLUTION RESULTS
# =============================================================================

@dataclass(frozen=True)
class Found:
    """An existing file with a known content type."""

    content_type: str
    path: str


@dataclass(frozen=True)
class NotFound:
    """Nothing servable at the requested path."""

    path: Optional[str] = None


Resource = Union[Found, NotFound]


class ResourceResolver:
    """
    Resolves request paths against a filesystem.

    Usage:
        resolver = ResourceResolver(LocalFileSystem("/var/www"))
        resource = resolver.resolve("index.html")
        if isinstance(resource, Found):
            ...
    """

    def __init__(
        self,
        filesystem: LocalFileSystem,
        content_types: Mapping[str, str] = DEFAULT_CONTENT_TYPES,
    ):
        self.filesystem = filesystem
        self.content_types = content_types

    def resolve(self, path: Optional[str]) -> Resource:
        """
        Decide what to serve for path.

        Args:
            path: Resource path from the request, or None.

        Returns:
            Found for an existing file with a mapped extension,
            NotFound otherwise.
        """
        if path is None:
            return NotFound()

        if not self.filesystem.exists(path):
            return NotFound(path)

        content_type = get_content_type(path, self.content_types)
        if content_type is None:
            # Existing file, but we don't know how to label it
            logger.warning(f"Refusing to serve unmapped extension: {path}")
            return NotFound(path)

        return Found(content_type=content_type, path=path)
