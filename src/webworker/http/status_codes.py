"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The worker only ever answers with two codes:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK         - the file exists and its type is known       │
    │  404   │ Not Found  - anything else                               │
    └────────┴───────────────────────────────────────────────────────────┘

The status line carries the code alone ("HTTP/1.1 200"), so the phrase
is only used for the 404 body text.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes used in responses.

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
