"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Decides the final status for a parsed request and frames the response.

=============================================================================
RESPONSE ANATOMY
=============================================================================

Every response has the same five header lines, always in this order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                                              │
    │    Date: Sun, 06 Nov 1994 08:49:37 GMT\r\n       ← now              │
    │    Server: StaticServer/1.0\r\n                                     │
    │    Last-Modified: Sat, 05 Nov 1994 10:00:00 GMT\r\n                 │
    │    Content-Length: 2\r\n                                            │
    │    \r\n                                                             │
    │    hi                                            ← body (maybe)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Last-Modified is the file's mtime when the file exists and the request
parsed cleanly, otherwise the current time.

=============================================================================
STATUS DECISION
=============================================================================

        parser status != 200? ──yes──► keep it (400 / 501)
                 │ no
                 ▼
        file missing or not a regular file? ──yes──► 404
                 │ no
                 ▼
        If-Modified-Since sent and
        mtime (whole seconds) <= since (whole seconds)? ──yes──► 304
                 │ no
                 ▼
                200

=============================================================================
BODY AND CONTENT-LENGTH
=============================================================================

    ┌──────────────┬──────────────┬────────────────────┬──────────────────┐
    │ Method       │ Status       │ Body               │ Content-Length   │
    ├──────────────┼──────────────┼────────────────────┼──────────────────┤
    │ GET          │ 200          │ file bytes         │ len(file)        │
    │ GET          │ 304          │ none               │ 0                │
    │ GET          │ 400/404/...  │ generated HTML     │ len(page)        │
    │ HEAD         │ any          │ none               │ 0                │
    │ other (501)  │ any          │ none               │ 0                │
    └──────────────┴──────────────┴────────────────────┴──────────────────┘

HEAD reports Content-Length: 0 rather than the size a GET would return.
That is a simplification of full HTTP semantics kept for compatibility
with existing clients of this server; do not "fix" it here.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .dates import format_http_date, to_epoch_seconds
from .request import HTTPRequest
from .status_codes import HTTPStatus, reason_phrase
from ..handlers.static import ResolvedResource, read_file


DEFAULT_SERVER_NAME = "StaticServer/1.0"


@dataclass
class HTTPResponse:
    """
    A response ready to be written to the socket.

    content_length always equals len(body) when a body is present and is
    0 otherwise.
    """

    status: int = HTTPStatus.OK
    body: Optional[bytes] = None
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    server_name: str = DEFAULT_SERVER_NAME
    version: str = "HTTP/1.1"

    @property
    def phrase(self) -> str:
        return reason_phrase(self.status)

    @property
    def content_length(self) -> int:
        return len(self.body) if self.body is not None else 0

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {self.phrase}"

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers, in wire order."""
        return [
            ("Date", format_http_date(self.date)),
            ("Server", self.server_name),
            ("Last-Modified", format_http_date(self.last_modified)),
            ("Content-Length", str(self.content_length)),
        ]

    def header_bytes(self) -> bytes:
        """Status line and headers, terminated by the blank line."""
        lines = [self.status_line]
        for name, value in self.headers:
            lines.append(f"{name}: {value}")
        lines.append("")

        # HTTP/1.1 header fields are ISO-8859-1
        return "\r\n".join(lines).encode("iso-8859-1") + b"\r\n"

    def to_bytes(self) -> bytes:
        """Serialize the full response for socket.sendall()."""
        return self.header_bytes() + (self.body or b"")


def error_page(status: int) -> bytes:
    """Minimal HTML page naming the status code and phrase."""
    title = f"{int(status)} {reason_phrase(status)}"
    html = (
        "<!DOCTYPE html>\r\n"
        "<html>\r\n"
        f"<head><title>{title}</title></head>\r\n"
        "<body>\r\n"
        f"<h1>{title}</h1>\r\n"
        "<p>The server could not fulfill your request.</p>\r\n"
        "</body>\r\n"
        "</html>\r\n"
    )
    return html.encode("iso-8859-1")


class ResponseBuilder:
    """
    Builds the HTTPResponse for a parsed request and its resolved file.

    Usage:
        builder = ResponseBuilder("StaticServer/1.0")
        response = builder.build(request, inspect_path(request.file_path))
        conn.send_response(response.to_bytes())
    """

    def __init__(self, server_name: str = DEFAULT_SERVER_NAME):
        self.server_name = server_name

    @staticmethod
    def resolve_status(request: HTTPRequest, resource: Optional[ResolvedResource]) -> int:
        """
        Decide the final status code (see module docstring).

        Args:
            request: Parsed request.
            resource: Resolved file, or None when the parser produced no path.
        """
        if request.failed:
            return request.status

        if resource is None or not resource.servable:
            return HTTPStatus.NOT_FOUND

        since = request.if_modified_since
        if since is not None and to_epoch_seconds(resource.last_modified) <= to_epoch_seconds(since):
            return HTTPStatus.NOT_MODIFIED

        return HTTPStatus.OK

    def build(
        self,
        request: HTTPRequest,
        resource: Optional[ResolvedResource],
        now: Optional[datetime] = None,
    ) -> HTTPResponse:
        """
        Build the response.

        Args:
            request: Parsed request.
            resource: Resolved file (None if the request had no file_path).
            now: Clock override, mainly for tests.

        Raises:
            OSError: If the file cannot be read after it was inspected.
        """
        now = now or datetime.now(timezone.utc)
        status = self.resolve_status(request, resource)

        # ─────────────────────────────────────────────────────────────────
        # BODY: GET only, never for 304
        # ─────────────────────────────────────────────────────────────────
        body = None
        if request.is_get and status != HTTPStatus.NOT_MODIFIED:
            if status == HTTPStatus.OK:
                body = read_file(resource)
            else:
                body = error_page(status)

        # ─────────────────────────────────────────────────────────────────
        # LAST-MODIFIED: file mtime for a served file, else now
        # ─────────────────────────────────────────────────────────────────
        if not request.failed and resource is not None and resource.servable:
            last_modified = datetime.fromtimestamp(resource.last_modified, tz=timezone.utc)
        else:
            last_modified = now

        return HTTPResponse(
            status=status,
            body=body,
            last_modified=last_modified,
            date=now,
            server_name=self.server_name,
        )


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. ResponseBuilder.resolve_status(): parser error > 404 > 304 > 200
# 2. Bodies only for GET (file bytes for 200, an HTML page otherwise)
# 3. HTTPResponse.to_bytes(): fixed header order, CRLF framing
# =============================================================================
