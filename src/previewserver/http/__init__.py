"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

The small slice of HTTP/1.x the preview server speaks:

    request.py       Raw request head → HTTPRequest (target, decoded path)
    response.py      HTTPResponse / ResponseBuilder → bytes on the wire
    status_codes.py  200, 400, 404
    mime_types.py    File extension → Content-Type (or none)

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    file_response,
    not_found,
    bad_request,
    format_http_date,
)
from .status_codes import HTTPStatus
from .mime_types import CONTENT_TYPES, get_content_type

__all__ = [
    # Request
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "file_response",
    "not_found",
    "bad_request",
    "format_http_date",
    "HTTPStatus",
    # Content types
    "CONTENT_TYPES",
    "get_content_type",
]
