"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes the preview server ever sends.

    200 OK            A file was resolved and its bytes follow
    400 Bad Request   The request head could not be parsed
    404 Not Found     Resolution failed (missing file, traversal attempt)

A path that tries to climb out of the root answers 404, the same as a
file that does not exist.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so a status compares equal to its integer code:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
}
