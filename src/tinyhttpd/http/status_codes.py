"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The fixed status registry for tinyhttpd.

The server only ever answers with five status codes. Keeping the table
this small is deliberate: every code the server can emit is listed here,
and every status line it writes is produced from this table.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When tinyhttpd sends it                                   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ GET /, /echo/..., /user-agent, file found                 │
    │  201   │ POST /files/... stored the body                           │
    │  400   │ Malformed request line, body shorter than Content-Length  │
    │  404   │ Unknown route, missing or unreadable file                 │
    │  500   │ File could not be created/written, handler crashed        │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
STATUS LINE FORMAT
=============================================================================

    HTTP/1.1 404 Not Found\r\n
    ──┬───── ─┬─ ────┬────
      │       │      │
    Version  Code  Reason phrase

=============================================================================
"""

from enum import IntEnum


PROTOCOL_VERSION = "HTTP/1.1"


class HTTPStatus(IntEnum):
    """
    HTTP status codes produced by the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'

    Looking up a code that is not registered raises ValueError:

        >>> HTTPStatus(418)
        Traceback (most recent call last):
        ...
        ValueError: 418 is not a valid HTTPStatus
    """

    # 2xx SUCCESS
    OK = 200                        # Request handled, body (maybe) attached
    CREATED = 201                   # File stored by POST /files/...

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400               # Unparsable request line / short body
    NOT_FOUND = 404                 # No route, or no such file

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500     # Filesystem failure or handler crash

    @property
    def phrase(self) -> str:
        """Reason phrase for this status code."""
        return _STATUS_PHRASES[self]


# =============================================================================
# REASON PHRASES
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def status_line(code: int) -> str:
    """
    Build the status line (without CRLF) for a registered code.

    Args:
        code: One of the registered status codes (int or HTTPStatus).

    Returns:
        "HTTP/1.1 <code> <reason>"

    Raises:
        ValueError: If the code is not in the registry.
    """
    status = HTTPStatus(code)
    return f"{PROTOCOL_VERSION} {status.value} {status.phrase}"
