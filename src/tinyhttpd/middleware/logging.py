"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Writes one line per request to the "tinyhttpd.access" logger:

    127.0.0.1 "GET /echo/abc" 200 3 0.41ms
    ────┬────  ──────┬──────  ─┬─ ┬ ──┬───
        │            │         │  │   │
    client IP   method + path  │  │   handler time
                            status body bytes

The logger is namespaced so it can be tuned on its own:

    logging.getLogger("tinyhttpd.access").setLevel(logging.WARNING)

=============================================================================
"""

import logging
import time
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("tinyhttpd.access")


@dataclass
class RequestLog:
    """One access log entry."""

    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_text(self) -> str:
        return (
            f'{self.client_ip} "{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so its timing covers everything
    behind it. Handler exceptions are logged here and re-raised; turning
    them into a 500 is the server's job.
    """

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0] or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )
        logger.log(self.log_level, log_entry.to_text())

        return response
