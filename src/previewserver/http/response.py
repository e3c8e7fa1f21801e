"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the HTTP/1.1 responses the preview server sends.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                    ← status line               │
    │  Content-Type: text/html; charset=utf8\r\n   (only if known)        │
    │  Content-Length: 5\r\n                  ← auto-added                │
    │  Date: Sun, 18 Oct 2026 12:00:00 GMT\r\n ← auto-added               │
    │  Server: previewserver\r\n             ← auto-added                 │
    │  Connection: close\r\n                                              │
    │  \r\n                                                               │
    │  Hello                                  ← whole file, one body      │
    └─────────────────────────────────────────────────────────────────────┘

Every response is final: one request per connection, so the builder's
terminal step always marks the connection for closing.

Usage:

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/css")
        .body(data)
        .build())

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


SERVER_NAME = "previewserver"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized onto a socket.

    Use ResponseBuilder or the helper functions below to create one.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Status line, e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def to_bytes(self, server_name: str = SERVER_NAME) -> bytes:
        """
        Serialize the response for socket.sendall().

        Content-Length, Date and Server are filled in unless already set.
        The header section is latin-1 encoded, the body is sent verbatim.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Each method returns self, build() returns the finished response with
    "Connection: close" set.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def content_type(self, content_type: Optional[str]) -> "ResponseBuilder":
        """
        Set the Content-Type header.

        None leaves the header out entirely rather than guessing one.
        """
        if content_type is not None:
            self.header("Content-Type", content_type)
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the response body. Strings are UTF-8 encoded."""
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def build(self) -> HTTPResponse:
        """Build the final HTTPResponse."""
        headers = dict(self._headers)
        headers["Connection"] = "close"
        return HTTPResponse(status=self._status, headers=headers, body=self._body)


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Sun, 18 Oct 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def file_response(content: bytes, content_type: Optional[str]) -> HTTPResponse:
    """200 OK carrying a whole file, with Content-Type only if known."""
    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type(content_type)
        .body(content)
        .build())


def not_found() -> HTTPResponse:
    """404 Not Found with an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def bad_request() -> HTTPResponse:
    """400 Bad Request with an empty body."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).build()
