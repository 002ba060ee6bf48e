"""
HTTP protocol layer: request parsing, response building, routing.

    request.py       raw bytes → HTTPRequest
    headers.py       ordered, case-insensitive header list
    response.py      HTTPResponse → raw bytes
    status_codes.py  the five status codes the server emits
    compression.py   gzip negotiation and encoding
    router.py        (method, path) → handler
"""

from .headers import Headers
from .request import HTTPRequest, HTTPParseError, IncompleteBodyError, RequestParser, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    bad_request,
    created,
    empty,
    internal_error,
    not_found,
    ok,
    ok_binary,
    ok_text,
)
from .status_codes import HTTPStatus, status_line
from .compression import accepts_gzip, gzip_encode
from .router import Route, RouteMatch, Router

__all__ = [
    "Headers",
    "HTTPRequest",
    "HTTPParseError",
    "IncompleteBodyError",
    "RequestParser",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "bad_request",
    "created",
    "empty",
    "internal_error",
    "not_found",
    "ok",
    "ok_binary",
    "ok_text",
    "HTTPStatus",
    "status_line",
    "accepts_gzip",
    "gzip_encode",
    "Route",
    "RouteMatch",
    "Router",
]
