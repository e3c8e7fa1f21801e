"""
=============================================================================
STATIC SITE HANDLER
=============================================================================

Maps a request path onto a file inside the root directory and answers
with its bytes.

=============================================================================
RESOLUTION ORDER
=============================================================================

Given the request path and the root directory, the first match wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     resolve(path, root)                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   0. ".." anywhere in path?          → NotFound                     │
    │                                                                      │
    │   candidate = root / path-without-leading-"/"                       │
    │                                                                      │
    │   1. candidate is a file?            → serve candidate              │
    │   2. candidate/index.html is a file? → serve candidate/index.html   │
    │   3. candidate with ".html" extension → serve it if it is a file    │
    │   4. otherwise                       → NotFound                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    EXAMPLES (root contains index.html, about.html, docs/guide.html):

        /                  → index.html          (step 2, root itself)
        /docs/guide.html   → docs/guide.html     (step 1)
        /about             → about.html          (step 3, suffix appended)
        /about.json        → about.html          (step 3, suffix REPLACED)
        /docs              → NotFound            (no docs/index.html, no docs.html)
        /docs/../index.html→ NotFound            (step 0)

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The guard is a coarse TEXTUAL check: any occurrence of ".." rejects the
request, including a legitimate file name such as "a..b". Nothing is
canonicalized. Because no ".." can reach step 1, joining the remaining
segments onto the root can never climb above it.

    GET /docs/../../etc/passwd   → 404, filesystem never touched

Symlinks inside the root are followed like any other file.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, file_response, not_found
from ..http.mime_types import get_content_type


logger = logging.getLogger(__name__)


INDEX_FILE = "index.html"
FALLBACK_SUFFIX = ".html"


@dataclass(frozen=True)
class ResolvedFile:
    """
    A servable file found by resolve().

    Attributes:
        path: Absolute filesystem path of the file.
        content_type: Content-Type header value, or None to omit the header.
    """

    path: Path
    content_type: Optional[str]


def resolve(request_path: str, root_directory: Union[str, Path]) -> Optional[ResolvedFile]:
    """
    Resolve a request path to a file under root_directory.

    Pure apart from read-only filesystem checks; the same inputs against
    the same tree always give the same answer.

    Args:
        request_path: Decoded request path, e.g. "/docs/guide".
        root_directory: Directory being served.

    Returns:
        ResolvedFile, or None when nothing should be served (404).
    """
    # ─────────────────────────────────────────────────────────────────
    # STEP 0: TRAVERSAL GUARD
    # ─────────────────────────────────────────────────────────────────
    if ".." in request_path:
        return None

    # ─────────────────────────────────────────────────────────────────
    # COMPOSE CANDIDATE PATH
    # ─────────────────────────────────────────────────────────────────
    # parts[0] is the leading "/" (the root component), the rest are
    # the segments to join. "/" has no segments → the root itself.
    root = Path(root_directory)
    segments = PurePosixPath(request_path).parts[1:]
    candidate = root.joinpath(*segments)

    # ─────────────────────────────────────────────────────────────────
    # STEP 1: EXISTING FILE
    # ─────────────────────────────────────────────────────────────────
    if _is_file(candidate):
        return _serve(candidate)

    # ─────────────────────────────────────────────────────────────────
    # STEP 2: DIRECTORY INDEX
    # ─────────────────────────────────────────────────────────────────
    if _is_dir(candidate):
        index_path = candidate / INDEX_FILE
        if _is_file(index_path):
            return _serve(index_path)

    # ─────────────────────────────────────────────────────────────────
    # STEP 3: ".html" FALLBACK
    # ─────────────────────────────────────────────────────────────────
    # The extension is replaced, or appended when there is none:
    # "about" → "about.html", "data.json" → "data.html", "foo." → "foo.html".
    # Not applied to the root itself: its sibling lives outside the root.
    if segments:
        html_path = _html_sibling(candidate)
        if _is_file(html_path):
            return _serve(html_path)

    return None


def _serve(path: Path) -> ResolvedFile:
    return ResolvedFile(path=path, content_type=get_content_type(path))


def _html_sibling(path: Path) -> Path:
    # PurePath.suffix ignores a trailing dot, so with_suffix would give "foo..html"
    if path.name.endswith("."):
        return path.with_name(path.name[:-1] + FALLBACK_SUFFIX)
    return path.with_suffix(FALLBACK_SUFFIX)


def _is_file(path: Path) -> bool:
    """is_file() that reads any stat failure (name too long, no permission) as "no"."""
    try:
        return path.is_file()
    except OSError:
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


class StaticSiteHandler:
    """
    Answers requests with files from a fixed root directory.

    One instance is shared, read-only, by every worker thread.

        handler = StaticSiteHandler("/home/me/site/_build")
        response = handler.handle(request)   # 200 with file or 404
    """

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Resolve and read the requested file.

        The whole file is read into memory and sent as one body.

        Raises:
            OSError: If the resolved file cannot be read (removed between
                     resolution and open, permission denied, ...).
        """
        target = resolve(request.path, self.root_dir)
        if target is None:
            return not_found()

        content = target.path.read_bytes()
        logger.debug(f"{request.method} {request.path} -> {target.path} ({len(content)} bytes)")
        return file_response(content, target.content_type)
