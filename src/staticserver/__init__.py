"""
=============================================================================
STATICSERVER - Minimal HTTP/1.1 Static File Server
=============================================================================

This package implements a small HTTP/1.1 origin server on raw Python
sockets. It serves files from a document root and speaks just enough of
the protocol to be useful behind a browser or curl:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    STATICSERVER AT A GLANCE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. METHODS                                                        │
    │      - GET and HEAD only                                            │
    │      - Anything else gets 501 Not Implemented                       │
    │                                                                      │
    │   2. PERSISTENT CONNECTIONS                                         │
    │      - Many requests per TCP connection, one at a time             │
    │      - Idle connections close after a short timeout (3s)           │
    │                                                                      │
    │   3. CONDITIONAL GET                                                │
    │      - If-Modified-Since in RFC 1123, RFC 850 or asctime format    │
    │      - 304 Not Modified when the file has not changed              │
    │                                                                      │
    │   4. ONE THREAD PER CONNECTION                                      │
    │      - Connections share nothing but the read-only config          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    staticserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m staticserver)
    ├── server.py            # HTTPServer + the per-connection request loop
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Per-request access log records
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # Line-oriented socket wrapper
    ├── http/                # HTTP protocol components
    │   ├── dates.py         # HTTP-date parsing and formatting
    │   ├── request.py       # Request line + header parsing
    │   ├── response.py      # Status decision + response framing
    │   └── status_codes.py  # Status codes and reason phrases
    └── handlers/
        └── static.py        # Target path → filesystem resolution

=============================================================================
QUICK START
=============================================================================

    from staticserver import HTTPServer, ServerConfig

    config = ServerConfig(port=8080).with_root("~/public_html")
    HTTPServer(config).run()

Or from the shell:

    python -m staticserver 8080 ~/public_html

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, serve_connection
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "serve_connection", "__version__"]
