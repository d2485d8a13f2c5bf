"""
=============================================================================
HANDLERS PACKAGE
=============================================================================

Resolution of request targets to files on disk.

    from staticserver.handlers import resolve

    resource = resolve("/srv/site", "/docs/")
    if resource.servable:
        body = read_file(resource)

=============================================================================
"""

from .static import (
    INDEX_FILE,
    ResolvedResource,
    inspect_path,
    read_file,
    resolve,
    resolve_path,
)

__all__ = [
    "INDEX_FILE",
    "ResolvedResource",
    "inspect_path",
    "read_file",
    "resolve",
    "resolve_path",
]
