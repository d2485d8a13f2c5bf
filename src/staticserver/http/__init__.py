"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

The protocol half of the server, independent of sockets:

    dates.py         parse_http_date() / format_http_date()
    status_codes.py  HTTPStatus and reason_phrase()
    request.py       RequestParser → HTTPRequest
    response.py      ResponseBuilder → HTTPResponse

    from staticserver.http import RequestParser, ResponseBuilder

=============================================================================
"""

from .dates import format_http_date, parse_http_date, to_epoch_seconds
from .status_codes import HTTPStatus, reason_phrase
from .request import HTTPRequest, RequestParser, normalize_target, parse_request
from .response import HTTPResponse, ResponseBuilder, error_page

__all__ = [
    # Dates
    "format_http_date",
    "parse_http_date",
    "to_epoch_seconds",
    # Status
    "HTTPStatus",
    "reason_phrase",
    # Request
    "HTTPRequest",
    "RequestParser",
    "normalize_target",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "error_page",
]
