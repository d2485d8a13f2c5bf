"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever produces five status codes:

    ┌────────┬───────────────────────┬─────────────────────────────────────┐
    │  Code  │ Phrase                │ When                                │
    ├────────┼───────────────────────┼─────────────────────────────────────┤
    │  200   │ OK                    │ File found and sent                 │
    │  304   │ Not Modified          │ If-Modified-Since is still current  │
    │  400   │ Bad Request           │ Short request line, bad date        │
    │  404   │ Not Found             │ Missing file, or not a plain file   │
    │  501   │ Not Implemented       │ Any method except GET / HEAD        │
    └────────┴───────────────────────┴─────────────────────────────────────┘

Any other numeric code renders with the phrase "Unknown".
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                  # Standard success response
    NOT_MODIFIED = 304        # Cached version is still valid
    BAD_REQUEST = 400         # Malformed request syntax
    NOT_FOUND = 404           # Resource doesn't exist
    NOT_IMPLEMENTED = 501     # Method not supported

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return reason_phrase(self)


_STATUS_PHRASES = {
    200: "OK",
    304: "Not Modified",
    400: "Bad Request",
    404: "Not Found",
    501: "Not Implemented",
}


def reason_phrase(code: int) -> str:
    """
    Map a numeric status code to its reason phrase.

    Args:
        code: Numeric status code.

    Returns:
        The phrase, or "Unknown" for codes outside the table.
    """
    return _STATUS_PHRASES.get(int(code), "Unknown")
