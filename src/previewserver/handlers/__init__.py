"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    StaticSiteHandler   Serves files from the root directory
    resolve()           Request path → ResolvedFile or None

=============================================================================
"""

from .static import StaticSiteHandler, ResolvedFile, resolve

__all__ = [
    "StaticSiteHandler",
    "ResolvedFile",
    "resolve",
]
