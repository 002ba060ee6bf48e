"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses the raw bytes read from a client socket into an HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ────────┬──────── ───┬────                             │ │
    │  │     │           │            │                                  │ │
    │  │   Method       Path        Version                              │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (Content-Length bytes) ──────────────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHERE THE BODY COMES FROM
=============================================================================

The connection reads until it has seen the blank line that ends the
headers. Whatever arrived after that line in the same reads is kept as
the *buffered* part of the body. The rest is still sitting in the socket.

    recv() #1:  "POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nhel"
                 ───────────────── headers ─────────────────────   ─┬─
                                                                    │
                                              request.body (buffered)

    recv() #2:  "lo world"   ← pulled by request.read_body() on demand

Only the handler that actually needs the body (POST /files/...) calls
read_body(). Every other route never touches the socket again.

=============================================================================
PARSING RULES
=============================================================================

1. Request line splits on single spaces:  METHOD SP PATH [SP VERSION]
   Fewer than two tokens → HTTPParseError (400).
2. Each following line up to the first empty line is a header, split on
   the FIRST colon. "Name:value" and "Name:   value" are equivalent.
3. Lines without a colon are skipped (lenient parsing).
4. The path is kept exactly as sent: no URL decoding, query string kept.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .headers import Headers


HEADER_TERMINATOR = b"\r\n\r\n"

# Reads up to n more body bytes from the client. Returns b"" on EOF.
BodySource = Callable[[int], bytes]


class HTTPParseError(Exception):
    """
    Raised when the request cannot be parsed.

    Carries the HTTP status code the server should answer with. Parsing
    failures are always the client's fault, so this is 400.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class IncompleteBodyError(Exception):
    """The client sent fewer body bytes than its Content-Length promised."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Incomplete body: expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         "GET", "POST", ... exactly as sent
        path:           Raw request target ("/echo/abc", "/files/a.txt")
        version:        "HTTP/1.1" unless the client said otherwise
        headers:        Headers list (ordered, case-insensitive lookup)
        body:           Body bytes already buffered with the headers
        path_params:    Values captured by the router ({"message": "abc"})
        client_address: (ip, port) of the peer, for logging
        body_source:    Callable that reads more body bytes from the socket

    =========================================================================
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""

    # Router-injected parameters
    path_params: Dict[str, str] = field(default_factory=dict)

    # Connection metadata
    client_address: tuple[str, int] = ("", 0)
    body_source: Optional[BodySource] = field(default=None, repr=False)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def content_length(self) -> int:
        """
        Declared body length.

        Missing, unparsable or negative values count as 0. A bad
        Content-Length is never an error on its own.
        """
        try:
            length = int(self.headers.get("Content-Length", "0").strip())
        except ValueError:
            return 0
        return max(length, 0)

    @property
    def user_agent(self) -> str:
        """Value of the first User-Agent header, or an empty string."""
        return self.headers.get("User-Agent", "")

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive lookup of the first header called `name`."""
        return self.headers.get(name, default)

    def read_body(self) -> bytes:
        """
        Return exactly `content_length` body bytes.

        Buffered bytes are consumed first; anything still missing is read
        from `body_source`, blocking until enough bytes arrive.

        Raises:
            IncompleteBodyError: The client closed the connection, the
                read timed out or failed, or there is nothing left to
                read from before the declared length was reached.
        """
        expected = self.content_length
        data = self.body[:expected]

        while len(data) < expected:
            if self.body_source is None:
                raise IncompleteBodyError(expected, len(data))
            try:
                chunk = self.body_source(expected - len(data))
            except OSError as e:
                # TimeoutError and connection resets both land here
                raise IncompleteBodyError(expected, len(data)) from e
            if not chunk:
                raise IncompleteBodyError(expected, len(data))
            data += chunk

        return data[:expected]


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER PIPELINE
    ==========================================================================

        Raw bytes
            │
            ▼
        1. Split at \\r\\n\\r\\n ──► header block | buffered body
            │
            ▼
        2. Decode header block (UTF-8, bad bytes replaced)
            │
            ▼
        3. Request line ──► method, path, version   (400 if < 2 tokens)
            │
            ▼
        4. Header lines ──► Headers([(name, value), ...])
            │
            ▼
        HTTPRequest

    ==========================================================================
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Args:
            data: Bytes read from the socket (headers plus whatever body
                  bytes arrived with them).
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest. Its `body` holds only the buffered bytes.

        Raises:
            HTTPParseError: If the request line is malformed.
        """
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            # No blank line seen: treat everything as the header block
            header_block, buffered_body = data, b""
        else:
            header_block = data[:header_end]
            buffered_body = data[header_end + len(HEADER_TERMINATOR):]

        lines = header_block.decode("utf-8", errors="replace").split("\r\n")

        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=buffered_body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split the request line on single spaces.

            "GET /echo/abc HTTP/1.1"  → ("GET", "/echo/abc", "HTTP/1.1")
            "GET /"                   → ("GET", "/", "HTTP/1.1")
            "GET"                     → HTTPParseError
        """
        parts = line.split(" ")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, path = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 and parts[2] else "HTTP/1.1"
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Headers:
        headers = Headers()
        for line in lines:
            if not line:
                break  # Blank line ends the header section
            name, sep, value = line.partition(":")
            if not sep:
                continue  # Skip malformed header lines
            headers.add(name.strip(), value.lstrip())
        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """Parse request bytes in one call."""
    return RequestParser().parse(data, client_address)
