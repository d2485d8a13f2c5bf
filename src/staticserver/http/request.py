"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns a request line plus header lines from a line-oriented stream into
an HTTPRequest.

=============================================================================
WHY LINE BY LINE?
=============================================================================

A keep-alive connection carries many requests back to back:

    GET /a.html HTTP/1.1\r\n
    If-Modified-Since: Sun, 06 Nov 1994 08:49:37 GMT\r\n
    \r\n                                  ← end of request 1
    GET /b.html HTTP/1.1\r\n
    \r\n                                  ← end of request 2

The parser consumes EXACTLY one request's worth of lines. If it stopped
early, the leftover header lines would be read as the next request line
and every later request on the connection would be misframed. So even
when the outcome is already decided (bad request line, unknown method),
the remaining headers are drained up to the blank line.

There is one deliberate exception: an unparseable If-Modified-Since stops
reading on the spot. The stream position is then somewhere inside the
headers, so the request is flagged close_connection and the connection
loop hangs up after sending the 400.

=============================================================================
OUTCOMES
=============================================================================

    ┌─────────────────────────────────┬────────┬──────────────────────────┐
    │ Situation                       │ status │ close_connection         │
    ├─────────────────────────────────┼────────┼──────────────────────────┤
    │ Fewer than 2 tokens             │  400   │ no  (headers drained)    │
    │ Method not GET / HEAD           │  501   │ yes (headers drained)    │
    │ Bad If-Modified-Since           │  400   │ yes (stopped mid-header) │
    │ Read error while in headers     │  400   │ yes                      │
    │ Everything else                 │  200   │ no                       │
    └─────────────────────────────────┴────────┴──────────────────────────┘

200 here means "success so far". The response builder may still turn it
into 304 or 404 after looking at the file.

=============================================================================
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .dates import parse_http_date
from .status_codes import HTTPStatus
from ..handlers.static import INDEX_FILE, resolve_path


logger = logging.getLogger(__name__)


SUPPORTED_METHODS = ("GET", "HEAD")

IF_MODIFIED_SINCE = "if-modified-since:"

# Returns the next line without its terminator, or None at end of stream.
ReadLine = Callable[[], Optional[str]]


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method: "GET", "HEAD", or whatever unsupported token was sent.
        target: Request target, normalized to an absolute path.
        version: Protocol token from the request line (not validated).
        if_modified_since: Conditional timestamp, if the header was sent.
        status: 200 so far, or the error decided during parsing.
        file_path: Resolved filesystem path, when there is one.
        close_connection: Hang up after responding.
    """

    method: str = ""
    target: str = ""
    version: str = ""
    if_modified_since: Optional[datetime] = None
    status: int = HTTPStatus.OK
    file_path: Optional[str] = None
    close_connection: bool = False

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    @property
    def failed(self) -> bool:
        """True if parsing already settled on an error status."""
        return self.status != HTTPStatus.OK


def normalize_target(target: str) -> str:
    """
    Reduce an absolute-URI target to its path.

        http://example.com/a/b.html   →   /a/b.html
        HTTP://example.com            →   /
        /a/b.html                     →   /a/b.html   (unchanged)

    Anything starting with "http" (any case) is treated as an absolute
    URI: the path starts at the first "/" after the "//" authority marker.
    """
    if not target.lower().startswith("http"):
        return target

    scheme_end = target.find("//")
    path_start = target.find("/", scheme_end + 2) if scheme_end >= 0 else -1
    return target[path_start:] if path_start >= 0 else "/"


class RequestParser:
    """
    Parses one request from a line-oriented stream.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        request line (already read by the connection loop)
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Tokenize ──── < 2 tokens? ──► 400, drain headers             │
        │  2. Method ────── not GET/HEAD? ─► 501, drain headers, close     │
        │  3. Target ────── absolute URI? ─► strip scheme + authority      │
        │  4. Headers ───── If-Modified-Since unparseable? ─► 400, close   │
        │  5. Resolve ───── root + target (+ index.html for directories)   │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    ==========================================================================
    """

    def __init__(self, document_root: str, index_file: str = INDEX_FILE):
        """
        Args:
            document_root: Normalized document root.
            index_file: File served for directory targets.
        """
        self.document_root = document_root
        self.index_file = index_file

    def parse(self, request_line: str, read_line: ReadLine) -> HTTPRequest:
        """
        Parse a request whose first line has already been read.

        Args:
            request_line: The request line, e.g. "GET /a.html HTTP/1.1".
            read_line: Reads the next header line from the same stream.

        Returns:
            HTTPRequest with its outcome status. Never raises for protocol
            errors; those are reported through status.
        """
        request = HTTPRequest()

        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Tokenize the request line
        # ─────────────────────────────────────────────────────────────────
        tokens = request_line.split()
        if len(tokens) < 2:
            request.status = HTTPStatus.BAD_REQUEST
            self._drain_headers(read_line)
            return request

        request.method, request.target = tokens[0], tokens[1]
        if len(tokens) > 2:
            request.version = tokens[2]

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: Validate method (case-sensitive)
        # ─────────────────────────────────────────────────────────────────
        # The root is recorded as the target path but never inspected, so
        # Last-Modified on a 501 is the current time.
        if request.method not in SUPPORTED_METHODS:
            request.status = HTTPStatus.NOT_IMPLEMENTED
            request.close_connection = True
            self._drain_headers(read_line)
            request.file_path = resolve_path(self.document_root, "/", self.index_file)
            return request

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Absolute URI → absolute path
        # ─────────────────────────────────────────────────────────────────
        request.target = normalize_target(request.target)

        # ─────────────────────────────────────────────────────────────────
        # STEP 4: Headers
        # ─────────────────────────────────────────────────────────────────
        try:
            self._read_headers(request, read_line)
        except (OSError, ValueError) as e:
            # Timeout, reset or oversized line in the middle of the headers
            logger.warning(f"Failed reading headers for {request.method} {request.target}: {e}")
            request.status = HTTPStatus.BAD_REQUEST
            request.close_connection = True
            return request

        if request.failed:
            return request

        # ─────────────────────────────────────────────────────────────────
        # STEP 5: Resolve the filesystem path
        # ─────────────────────────────────────────────────────────────────
        request.file_path = resolve_path(self.document_root, request.target, self.index_file)
        return request

    def _read_headers(self, request: HTTPRequest, read_line: ReadLine) -> None:
        """Read header lines up to the blank line, picking out If-Modified-Since."""
        while True:
            line = read_line()
            if not line:
                return  # blank line or end of stream

            if line.lower().startswith(IF_MODIFIED_SINCE):
                value = line.split(":", 1)[1].strip()
                since = parse_http_date(value)
                if since is None:
                    logger.debug(f"Unparseable If-Modified-Since: {value!r}")
                    request.status = HTTPStatus.BAD_REQUEST
                    request.close_connection = True
                    return
                request.if_modified_since = since

    def _drain_headers(self, read_line: ReadLine) -> None:
        """Discard header lines up to the blank line to keep framing intact."""
        try:
            while read_line():
                pass
        except (OSError, ValueError) as e:
            # The next read on the connection will hit the same problem
            # and end the loop there.
            logger.debug(f"Header drain stopped early: {e}")


def parse_request(request_line: str, header_lines: list[str], document_root: str = "") -> HTTPRequest:
    """
    Parse a request from an in-memory list of header lines.

    Convenience wrapper used by tests and tools:

        request = parse_request("GET /a.html HTTP/1.1", ["Host: x", ""])

    Args:
        request_line: The request line.
        header_lines: Lines following it, in order.
        document_root: Root used to resolve file_path.
    """
    lines = iter(header_lines)
    return RequestParser(document_root).parse(request_line, lambda: next(lines, None))


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. HTTPRequest carries the parse outcome as a status code, not an exception
# 2. RequestParser always leaves the stream at a request boundary, except
#    after a bad If-Modified-Since (flagged close_connection)
# 3. normalize_target() handles absolute-URI request targets
# =============================================================================
