"""
=============================================================================
ACCESS LOGGING
=============================================================================

One record per request/response cycle, emitted on the
"staticserver.access" logger so it can be routed separately from the
server's own diagnostics:

    logging.getLogger("staticserver.access").addHandler(file_handler)

Two formats:

    text  127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /a.html" 200 2 0.41ms
    json  {"connection_id": "3f2a9c1e", "client_ip": "127.0.0.1", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .core.connection import Connection
from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("staticserver.access")


@dataclass
class RequestLog:
    """Structured log entry for one request."""

    connection_id: str
    client_ip: str
    method: str
    target: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-like access log line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits RequestLog entries.

    Args:
        log_format: "text" or "json".
        log_level: Level used for access records.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def record(
        self,
        conn: Connection,
        request: HTTPRequest,
        response: HTTPResponse,
        started: float,
    ) -> RequestLog:
        """
        Log a completed cycle.

        Args:
            conn: The connection the request arrived on.
            request: Parsed request.
            response: Response that was sent.
            started: time.time() when the request line was read.
        """
        entry = RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method or "-",
            target=request.target or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=(time.time() - started) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
