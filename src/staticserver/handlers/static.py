"""
=============================================================================
STATIC RESOURCE RESOLVER
=============================================================================

Maps a request target onto the filesystem and answers the three
questions the response builder needs:

    1. Does the path exist?
    2. Is it a regular file (not a directory, socket, device...)?
    3. When was it last modified?

=============================================================================
FLOW
=============================================================================

    Request: GET /docs

        1. path = root + target               /srv/site/docs
        2. Directory? append "/index.html"    /srv/site/docs/index.html
        3. stat() the final path              exists / regular / mtime

    The result is a ResolvedResource snapshot. It is never cached:
    static files may change between two requests on the same
    connection, and a stale mtime would break If-Modified-Since.

=============================================================================
SECURITY NOTE
=============================================================================

The target is appended to the root verbatim. ".." segments are NOT
collapsed, so "GET /../etc/passwd" resolves outside the document root.
This is a known gap of this minimal design and is kept as-is on purpose;
see DESIGN.md before changing it, since hardening changes which paths
are served.

=============================================================================
"""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


INDEX_FILE = "index.html"


@dataclass(frozen=True)
class ResolvedResource:
    """
    Filesystem snapshot of a request target.

    Attributes:
        path: Final filesystem path (after index substitution).
        exists: Whether anything exists at path.
        is_file: Whether it is a regular file.
        last_modified: Modification time in epoch seconds. Only set when
                       the path exists and is a regular file.
    """

    path: str
    exists: bool = False
    is_file: bool = False
    last_modified: Optional[float] = None

    @property
    def servable(self) -> bool:
        """True if the resource can be sent as a 200 body."""
        return self.exists and self.is_file


def resolve_path(root: str, target: str, index_file: str = INDEX_FILE) -> str:
    """
    Build the filesystem path for a request target.

    Args:
        root: Normalized document root (no trailing slash).
        target: Absolute-path request target, e.g. "/docs/".
        index_file: File name substituted for directories.

    Returns:
        Filesystem path. Directories get index_file appended.
    """
    path = root + target
    if os.path.isdir(path):
        if not path.endswith("/"):
            path += "/"
        path += index_file
    return path


def inspect_path(path: str) -> ResolvedResource:
    """
    Query existence, type and mtime of a path with a single stat().

    A path that cannot be stat'ed (missing, permission denied, broken
    symlink, embedded NUL byte) reports as non-existent and ends up as 404.
    """
    try:
        st = Path(path).stat()
    except (OSError, ValueError) as e:
        logger.debug(f"stat failed for {path}: {e}")
        return ResolvedResource(path=path)

    regular = stat.S_ISREG(st.st_mode)
    return ResolvedResource(
        path=path,
        exists=True,
        is_file=regular,
        last_modified=st.st_mtime if regular else None,
    )


def resolve(root: str, target: str, index_file: str = INDEX_FILE) -> ResolvedResource:
    """Resolve a target against the root and inspect the result."""
    return inspect_path(resolve_path(root, target, index_file))


def read_file(resource: ResolvedResource) -> bytes:
    """
    Read the whole file into memory.

    Note: files are not streamed, so memory per response is bounded only
    by the file size.

    Raises:
        OSError: If the file vanished or became unreadable after it was
                 inspected. The caller treats this as fatal for the
                 connection.
    """
    return Path(resource.path).read_bytes()
