"""
=============================================================================
MIDDLEWARE MODULE
=============================================================================

Request/response processing that wraps the router.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Middleware         │ Purpose                                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ LoggingMiddleware  │ One access-log line per request, with timing   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
