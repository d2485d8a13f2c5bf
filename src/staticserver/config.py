"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the static file server.

=============================================================================
ONE VALUE, BUILT ONCE
=============================================================================

The server has exactly two settings that really matter - the port and the
document root - plus a handful of tuning knobs. All of them live in a
single frozen dataclass:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION FLOW                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLI args / environment                                            │
    │          │                                                           │
    │          ▼                                                           │
    │   ServerConfig(...)     ← built once at startup                     │
    │          │                                                           │
    │          ├──► validate()   ← fail fast                               │
    │          │                                                           │
    │          ▼                                                           │
    │   HTTPServer(config)                                                │
    │          │                                                           │
    │          └──► every connection thread reads the same object         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Because the dataclass is frozen, worker threads can share it without any
locking. Nothing in the server mutates configuration after startup.

=============================================================================
DOCUMENT ROOT NORMALIZATION
=============================================================================

The request target is appended to the root as a plain string:

    root   = "/srv/site"
    target = "/a.html"
    path   = "/srv/site/a.html"

So the root must not end with a slash, and a leading "~" is expanded to
the invoking user's home directory:

    "~/site/"  →  "/home/alice/site"
    "/"        →  ""               (so "" + "/a.html" is still "/a.html")

=============================================================================
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


LOG_FORMATS = ("text", "json")


def normalize_root(path: str) -> str:
    """
    Normalize a document root path.

    Expands a leading ``~`` to the home directory and strips one trailing
    slash, so that ``root + target`` produces a well-formed path.

    Args:
        path: Root path as given on the command line.

    Returns:
        Normalized root path.
    """
    if path.startswith("~"):
        path = os.path.expanduser("~") + path[1:]
    if path.endswith("/"):
        path = path[:-1]
    return path


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    HTTP SETTINGS
    - keep_alive_timeout, max_line_size, index_file, server_name

    CONTENT
    - document_root

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections before new ones are refused.
    """

    buffer_size: int = 8192
    """
    Size of each socket recv() in bytes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive_timeout: float = 3.0
    """
    Idle timeout in seconds. A connection that sends nothing for this
    long is closed. This is not an error, just keep-alive expiry.
    """

    max_line_size: int = 8192
    """
    Longest request or header line accepted, in bytes. Longer lines
    terminate the connection.
    """

    index_file: str = "index.html"
    """
    File served when the target names a directory.
    """

    server_name: str = "StaticServer/1.0"
    """
    Value of the Server response header.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Directory files are served from, already normalized (see
    normalize_root). Use with_root() to build a config from a raw path.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR).
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-like) or 'json'.
    """

    def with_root(self, path: str) -> "ServerConfig":
        """Return a copy serving from ``path`` (normalized)."""
        return replace(self, document_root=normalize_root(path))

    @classmethod
    def from_env(cls, root: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST        Server host (default: 0.0.0.0)
        HTTP_PORT        Server port (default: 8080)
        HTTP_ROOT        Document root (default: .)
        HTTP_TIMEOUT     Keep-alive idle timeout in seconds (default: 3)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format (default: text)

        =====================================================================

        Args:
            root: Document root overriding HTTP_ROOT.
        """
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            keep_alive_timeout=float(os.getenv("HTTP_TIMEOUT", "3")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        ).with_root(root or os.getenv("HTTP_ROOT", "."))

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_line_size < 256:
            raise ValueError("max_line_size must be >= 256")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. "
                f"Expected one of {', '.join(LOG_FORMATS)}."
            )

        # "" is the normalized form of "/"
        if not os.path.isdir(self.document_root or "/"):
            raise ValueError(f"Document root is not a directory: {self.document_root}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. ServerConfig is frozen and shared read-only by every connection thread
# 2. normalize_root() applies the "~" and trailing-slash rules
# 3. from_env() supports container-style configuration
# 4. validate() fails fast at startup
# =============================================================================
