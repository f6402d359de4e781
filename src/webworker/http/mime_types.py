"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps a file's extension to the Content-Type header value sent with it.

Only a handful of types are served:

    ┌────────────────────────────────────────────────────────────────────┐
    │  .html          → text/html      (template-substituted)           │
    │  .jpg / .jpeg   → image/jpeg     (raw bytes)                      │
    │  .png           → image/png      (raw bytes)                      │
    │  .gif           → image/gif      (raw bytes)                      │
    │  .ico           → image/x-icon   (raw bytes)                      │
    └────────────────────────────────────────────────────────────────────┘

Unlike a general-purpose server there is NO application/octet-stream
fallback: an unknown extension means "do not serve". Lookups are
case-sensitive, so "photo.PNG" is unknown.

=============================================================================
"""

from pathlib import PurePath
from typing import Mapping, Optional

from ..config import DEFAULT_CONTENT_TYPES


HTML_TYPE = "text/html"


def get_content_type(
    path: str | PurePath,
    content_types: Mapping[str, str] = DEFAULT_CONTENT_TYPES,
) -> Optional[str]:
    """
    Get the content type for a path based on its extension.

    Examples:
        >>> get_content_type("index.html")
        'text/html'

        >>> get_content_type("img/logo.jpeg")
        'image/jpeg'

        >>> get_content_type("notes.txt") is None
        True

        >>> get_content_type("INDEX.HTML") is None
        True

    Returns:
        The content type, or None if the extension is not mapped.
    """
    suffix = PurePath(path).suffix  # no lower(): matching is case-sensitive
    if not suffix:
        return None
    return content_types.get(suffix)


def is_template_type(content_type: str) -> bool:
    """HTML bodies get token substitution; everything else is copied raw."""
    return content_type == HTML_TYPE
