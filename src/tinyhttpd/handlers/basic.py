"""
=============================================================================
BASIC HANDLERS
=============================================================================

The stateless routes: root, echo, user-agent reflection and the 404
fallback.

    ┌──────────────────────┬─────────────────────────────────────────────┐
    │ Request              │ Response                                    │
    ├──────────────────────┼─────────────────────────────────────────────┤
    │ GET /                │ HTTP/1.1 200 OK\r\n\r\n                     │
    │ GET /echo/abc        │ 200, text/plain, "abc"                      │
    │   + Accept-Encoding: │ 200, text/plain, Content-Encoding: gzip,    │
    │     gzip             │      gzip("abc")                            │
    │ GET /user-agent      │ 200, text/plain, <User-Agent value>         │
    │ anything else        │ HTTP/1.1 404 Not Found\r\n\r\n              │
    └──────────────────────┴─────────────────────────────────────────────┘

=============================================================================
"""

from ..http.compression import accepts_gzip, gzip_encode
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, not_found, ok, ok_text
from ..http.status_codes import HTTPStatus


def handle_root(request: HTTPRequest) -> HTTPResponse:
    return ok()


def handle_echo(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the path remainder after /echo/ back as text/plain.

    When the client's first Accept-Encoding header lists "gzip", the body
    is gzip-compressed and Content-Length counts the compressed bytes.
    Header order on the wire: Content-Type, Content-Encoding,
    Content-Length.
    """
    message = request.path_params.get("message", "")

    if not accepts_gzip(request.headers):
        return ok_text(message)

    compressed = gzip_encode(message.encode("utf-8"))
    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/plain")
        .header("Content-Encoding", "gzip")
        .header("Content-Length", str(len(compressed)))
        .body(compressed)
        .build())


def handle_user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the first User-Agent header verbatim (empty if absent)."""
    return ok_text(request.user_agent)


def handle_not_found(request: HTTPRequest) -> HTTPResponse:
    return not_found()
