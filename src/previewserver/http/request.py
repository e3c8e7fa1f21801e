"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw head of an HTTP/1.x request into an HTTPRequest.

=============================================================================
WHAT THE PREVIEW SERVER READS
=============================================================================

A request head looks like this:

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /docs/guide?x=1 HTTP/1.1\r\n      ← request line            │
    │  Host: 127.0.0.1:8080\r\n              ← headers                 │
    │  Accept: text/html\r\n                                           │
    │  \r\n                                  ← end of head             │
    └─────────────────────────────────────────────────────────────────┘

Only the request TARGET matters for serving a file. The method is kept for
logging but never checked: GET, HEAD, POST... are all answered the same
way. Headers are parsed leniently (malformed lines are skipped) and any
request body is ignored.

=============================================================================
FROM TARGET TO PATH
=============================================================================

    target                            path
    ──────                            ────
    /docs/guide?x=1                   /docs/guide
    http://localhost:8080/a.css       /a.css
    /my%20notes.txt                   /my notes.txt
    /%2e%2e/secret                    /../secret   (caught by the resolver)

The path is percent-decoded BEFORE it reaches the resolver, so encoded
parent-directory references are rejected by the same ".." check as plain
ones.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import unquote, urlsplit
import re


class HTTPParseError(Exception):
    """
    Raised when a request head cannot be parsed.

    The server answers these with a bare 400 Bad Request.
    """


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request head.

    Attributes:
        method:  Request method, as sent ("GET", "HEAD", ...).
        target:  Raw request target from the request line.
        path:    Decoded path without query string; what gets resolved.
        version: HTTP version string ("HTTP/1.1").
        headers: Header name (lowercase) → value.
    """

    method: str
    target: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)


class RequestParser:
    """
    Parses raw request heads into HTTPRequest objects.

    REQUEST_LINE_PATTERN: ^(\\S+) (\\S+) (HTTP/\\d\\.\\d)$

        (\\S+)          METHOD, any token (no method whitelist)
        (\\S+)          request target
        (HTTP/\\d\\.\\d)  version
    """

    REQUEST_LINE_PATTERN = re.compile(r"^(\S+) (\S+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_head_size: int = 64 * 1024):
        self.max_head_size = max_head_size

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse a raw request head.

        Args:
            data: Request bytes up to and including the blank line.
                  Anything after the blank line is ignored.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the head is oversized or malformed.
        """
        if len(data) > self.max_head_size:
            raise HTTPParseError(f"Request head too large: {len(data)} bytes")

        head, separator, _ = data.partition(b"\r\n\r\n")
        if not separator:
            raise HTTPParseError("Incomplete request: no header terminator")

        # latin-1 maps every byte, so decoding never fails
        lines = head.decode("latin-1").split("\r\n")

        method, target, version = self._parse_request_line(lines[0])
        return HTTPRequest(
            method=method,
            target=target,
            path=self._target_to_path(target),
            version=version,
            headers=self._parse_headers(lines[1:]),
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")
        return match.group(1), match.group(2), match.group(3)

    def _target_to_path(self, target: str) -> str:
        """
        Extract the decoded path from a request target.

        Absolute-form targets ("http://host/path") keep only their path.
        The query string is dropped. The result is percent-decoded.
        """
        if "://" in target:
            path = urlsplit(target).path or "/"
        else:
            path = target.partition("?")[0]
        return unquote(path)

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed header lines

            name = match.group(1).strip().lower()
            value = match.group(2).strip()
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value
        return headers


def parse_request(data: bytes) -> HTTPRequest:
    """Parse a request head with default limits."""
    return RequestParser().parse(data)
