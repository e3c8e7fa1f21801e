"""
=============================================================================
PREVIEWSERVER - Local HTTP preview for a directory of static output
=============================================================================

Point it at a build directory (generated docs, a static site, any artifact
tree) and browse it over HTTP:

    python -m previewserver ./_build --addr 127.0.0.1:8080

    Server running on http://127.0.0.1:8080/

=============================================================================
WHAT IT DOES
=============================================================================

    GET /                 → _build/index.html
    GET /docs/guide       → _build/docs/guide.html   (".html" fallback)
    GET /img/logo.png     → _build/img/logo.png      (image/png)
    GET /docs/../secrets  → 404                      (traversal guard)
    GET /missing          → 404

Sixteen worker threads answer requests concurrently; the accept loop
waits when all of them are busy.

=============================================================================
WHAT IT DOES NOT DO
=============================================================================

No TLS, no directory listings, no caching headers, no compression, no
keep-alive. It is a developer tool for trusted local use.

=============================================================================
EMBEDDING
=============================================================================

    from previewserver import PreviewServer

    server = PreviewServer("127.0.0.1:8080", "site/_build", color_output=False)
    server.run()   # blocks

=============================================================================
"""

__version__ = "1.0.0"

from .server import PreviewServer
from .config import ServerConfig, BindConfigurationError
from .core import ServerStartError
from .handlers import resolve, ResolvedFile

__all__ = [
    "PreviewServer",
    "ServerConfig",
    "BindConfigurationError",
    "ServerStartError",
    "resolve",
    "ResolvedFile",
    "__version__",
]
