"""
=============================================================================
TINYHTTPD
=============================================================================

A minimal HTTP/1.1 server on raw sockets: hand-written request parsing,
a fixed route table, gzip for echo responses, and file upload/download
below one directory.

=============================================================================
ROUTES
=============================================================================

    GET  /                  200, empty
    GET  /echo/{message}    200, text/plain, message (gzip if accepted)
    GET  /user-agent        200, text/plain, the User-Agent header
    GET  /files/{name}      200, application/octet-stream, or 404
    POST /files/{name}      201 after storing the body, 400/500 on failure
    anything else           404, empty

=============================================================================
PACKAGE LAYOUT
=============================================================================

    tinyhttpd/
    ├── __main__.py          CLI (python -m tinyhttpd)
    ├── config.py            ServerConfig
    ├── server.py            HTTPServer: thread per connection
    ├── core/
    │   ├── socket_server.py Listening socket, accept loop, signals
    │   └── connection.py    Client socket: reads, deadline, close
    ├── http/
    │   ├── request.py       Parser, HTTPRequest
    │   ├── headers.py       Ordered case-insensitive headers
    │   ├── response.py      HTTPResponse, ResponseBuilder
    │   ├── status_codes.py  200/201/400/404/500
    │   ├── compression.py   gzip negotiation
    │   └── router.py        Router, Route
    ├── handlers/
    │   ├── basic.py         root, echo, user-agent, 404
    │   └── files.py         FileHandler
    └── middleware/
        ├── base.py          Middleware, MiddlewarePipeline
        └── logging.py       Access log

=============================================================================
QUICK START
=============================================================================

    $ python -m tinyhttpd --directory /tmp/data
    $ curl -i localhost:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
