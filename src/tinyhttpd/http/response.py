"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the raw HTTP/1.1 response bytes tinyhttpd writes back.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (in the order they were set) ─────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Encoding: gzip\r\n                                  │ │
    │  │    Content-Length: 23\r\n                                      │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    <23 gzip bytes>                                              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No Date, Server or Connection headers are ever added. A response with no
body and no explicit Content-Length is just the status line and the
blank line:

    HTTP/1.1 404 Not Found\r\n\r\n

=============================================================================
CONTENT-LENGTH RULE
=============================================================================

    ┌───────────────────────────────┬────────────────────────────────────┐
    │ Response                      │ Content-Length written?            │
    ├───────────────────────────────┼────────────────────────────────────┤
    │ body non-empty                │ yes, = len(body)                   │
    │ body empty, header set        │ yes, = 0                           │
    │ body empty, header not set    │ no                                 │
    └───────────────────────────────┴────────────────────────────────────┘

Whenever the header is written its value is recomputed from the actual
body bytes, so a stale value (e.g. set before compression) can never
reach the wire.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .header("Content-Type", "text/plain")
        .header("Content-Encoding", "gzip")
        .body(compressed)
        .build())

Each method returns `self`, so calls chain; build() returns the
HTTPResponse.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus, status_line


CONTENT_LENGTH = "Content-Length"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Plain data container; handlers usually build one via ResponseBuilder
    or the convenience functions at the bottom of this module.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n   sock.sendall(
          status=200,              Content-Type: ...\\r\\n    response_bytes
          headers={...},           \\r\\n                   )
          body=b"abc"              abc"
        )

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)  # Insertion order = wire order
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """Status line for this response, e.g. "HTTP/1.1 200 OK"."""
        return status_line(self.status)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Headers are written in insertion order. Content-Length follows the
        rule in the module docstring and is always recomputed from the body.
        """
        response_headers = dict(self.headers)

        if self.body or CONTENT_LENGTH in response_headers:
            # Keeps the header's position if it was set, appends otherwise
            response_headers[CONTENT_LENGTH] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    ==========================================================================
    METHOD CHAINING
    ==========================================================================

        builder.status(200).header("Content-Type", "text/plain").body(b"x").build()
        ────────┬───────────────────┬──────────────────────────────┬───────┬───
                └───────────────────┴──────────────────────────────┘       │
                          All return 'self'                        returns response

    ==========================================================================
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS / HEADERS
    # =========================================================================

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        """
        Set the status code.

        Raises:
            ValueError: If the code is not one the server can emit.
        """
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the body. Strings are encoded as UTF-8."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """
        Plain-text body.

        Sets Content-Type and an explicit Content-Length, so an empty
        string still produces "Content-Length: 0".
        """
        self.content_type("text/plain")
        self.body(text)
        return self.header(CONTENT_LENGTH, str(len(self._body)))

    def binary(self, data: bytes) -> "ResponseBuilder":
        """Opaque file contents, always with a Content-Length."""
        self.content_type("application/octet-stream")
        self.body(data)
        return self.header(CONTENT_LENGTH, str(len(self._body)))

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Shortcut for build().to_bytes()."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

# One-liners for the fixed set of responses the handlers produce.
#
#     return ok()                 → HTTP/1.1 200 OK\r\n\r\n
#     return ok_text("abc")       → 200, text/plain, Content-Length: 3
#     return not_found()          → HTTP/1.1 404 Not Found\r\n\r\n

def empty(status: Union[HTTPStatus, int]) -> HTTPResponse:
    """Status line only: no headers, no body."""
    return ResponseBuilder().status(status).build()


def ok() -> HTTPResponse:
    return empty(HTTPStatus.OK)


def ok_text(text: str) -> HTTPResponse:
    """200 with a text/plain body."""
    return ResponseBuilder().status(HTTPStatus.OK).text(text).build()


def ok_binary(data: bytes) -> HTTPResponse:
    """200 with an application/octet-stream body."""
    return ResponseBuilder().status(HTTPStatus.OK).binary(data).build()


def created() -> HTTPResponse:
    return empty(HTTPStatus.CREATED)


def bad_request() -> HTTPResponse:
    return empty(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    return empty(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    return empty(HTTPStatus.INTERNAL_SERVER_ERROR)
