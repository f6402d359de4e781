"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The request/response cycle for a single connection:

    bytes in ──► RequestReader ──► path ──► ResourceResolver ──► Resource
                                                                    │
    bytes out ◄────────────────── ResponseWriter ◄──────────────────┘

=============================================================================
"""

from .request import Request, RequestReader, MalformedLineError
from .resource import Found, NotFound, Resource, ResourceResolver, LocalFileSystem
from .response import ResponseWriter, format_date, render_template
from .status_codes import HTTPStatus
from .mime_types import get_content_type

__all__ = [
    # Request
    "Request",
    "RequestReader",
    "MalformedLineError",
    # Resolution
    "Found",
    "NotFound",
    "Resource",
    "ResourceResolver",
    "LocalFileSystem",
    "get_content_type",
    # Response
    "ResponseWriter",
    "HTTPStatus",
    "format_date",
    "render_template",
]
