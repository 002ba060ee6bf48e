"""
=============================================================================
HANDLERS MODULE
=============================================================================

Request handlers and the fixed route table that wires them up.

=============================================================================
WHAT IS A HANDLER?
=============================================================================

A handler is a callable that takes an HTTPRequest and returns an
HTTPResponse:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Response         │
    │   ┌─────────┐           ┌─────────┐           ┌─────────┐          │
    │   │ GET     │           │         │           │ 200 OK  │          │
    │   │ /echo/  │ ────────▶ │ echo    │ ────────▶ │         │          │
    │   │ abc     │           │         │           │ abc     │          │
    │   └─────────┘           └─────────┘           └─────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Type              │ Here                                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │ Function Handler  │ handle_root, handle_echo, handle_user_agent     │
    │ Class Handler     │ FileHandler (holds the root directory)          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE ROUTE TABLE
=============================================================================

    #  Method  Pattern            Handler
    ─  ──────  ─────────────────  ────────────────────
    1  GET     /                  handle_root
    2  GET     /echo/*message     handle_echo
    3  GET     /user-agent        handle_user_agent
    4  GET     /files/*filename   FileHandler.read
    5  POST    /files/*filename   FileHandler.write
    –  any     anything else      handle_not_found

The table is fixed; build_router() only decides which directory the file
routes use.

=============================================================================
"""

from ..config import ServerConfig
from ..http.router import Route, Router
from .basic import handle_echo, handle_not_found, handle_root, handle_user_agent
from .files import FileHandler


def build_router(config: ServerConfig) -> Router:
    """Assemble the route table for `config.directory`."""
    files = FileHandler(config.directory)

    return Router(
        routes=[
            Route("GET", "/", handle_root, name="root"),
            Route("GET", "/echo/*message", handle_echo, name="echo"),
            Route("GET", "/user-agent", handle_user_agent, name="user_agent"),
            Route("GET", "/files/*filename", files.read, name="file_read"),
            Route("POST", "/files/*filename", files.write, name="file_write"),
        ],
        fallback=handle_not_found,
    )


__all__ = [
    "FileHandler",
    "build_router",
    "handle_echo",
    "handle_not_found",
    "handle_root",
    "handle_user_agent",
]
