"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type header value sent with a served
file.

=============================================================================
A FIXED, CASE-SENSITIVE TABLE
=============================================================================

The preview server only needs to get the common artifacts of a generated
site right: pages, stylesheets, scripts, images and the odd download.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    SERVED CONTENT TYPES                            │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  .txt          → text/plain; charset=utf8                          │
    │  .html .htm    → text/html; charset=utf8                           │
    │  .css          → text/css                                          │
    │  .js           → text/javascript                                   │
    │  .pdf          → application/pdf                                   │
    │  .zip          → application/zip                                   │
    │  .jpg .jpeg    → image/jpeg                                        │
    │  .png          → image/png                                         │
    │  .svg          → image/svg+xml                                     │
    │                                                                     │
    │  anything else → None (no Content-Type header at all)              │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

Two rules differ from a general purpose MIME database:

1. NO DEFAULT:
   Unknown extensions do NOT fall back to application/octet-stream.
   The response simply carries no Content-Type and the browser sniffs.

2. EXACT MATCH:
   The lookup is case-sensitive. "report.PDF" is not "report.pdf".

=============================================================================
"""

from pathlib import PurePath
from typing import Optional, Union


# =============================================================================
# CONTENT TYPE TABLE
# =============================================================================
#
# Keys are extensions with the leading dot, exactly as PurePath.suffix
# returns them. Never lowercased.
#
# =============================================================================

CONTENT_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    ".txt": "text/plain; charset=utf8",
    ".html": "text/html; charset=utf8",
    ".htm": "text/html; charset=utf8",
    ".css": "text/css",
    ".js": "text/javascript",

    # -------------------------------------------------------------------------
    # DOCUMENTS AND ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".zip": "application/zip",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".svg": "image/svg+xml",       # SVG is XML, hence +xml
}


def get_content_type(path: Union[str, PurePath]) -> Optional[str]:
    """
    Get the Content-Type header value for a file.

    Only the last extension counts ("bundle.tar.gz" → ".gz"). Files
    without an extension, dotfiles such as ".nojekyll" and extensions not
    in the table all yield None.

    Args:
        path: File path or bare file name.

    Returns:
        The header value, or None if no header should be sent.

    Examples:
        >>> get_content_type("docs/guide.html")
        'text/html; charset=utf8'

        >>> get_content_type("report.PDF") is None
        True

        >>> get_content_type("Makefile") is None
        True
    """
    return CONTENT_TYPES.get(PurePath(path).suffix)
