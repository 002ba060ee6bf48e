"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the lifetime of its single request.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    ┌──────────┐     ┌─────────────┐     ┌───────────┐     ┌──────────┐
    │ accepted │ ──► │ read_head() │ ──► │ handler   │ ──► │ send +   │
    │          │     │ until \r\n\r\n│   │ (maybe    │     │ close()  │
    │          │     │             │     │ recv_some)│     │          │
    └──────────┘     └─────────────┘     └───────────┘     └──────────┘

No keep-alive: after the response is written the connection is closed.

=============================================================================
THE DEADLINE
=============================================================================

A connection gets `timeout` seconds from the moment it was accepted. The
budget is shared by ALL reads, not reset per recv():

    accept            recv #1        recv #2                 deadline
      │───────────────────│──────────────│───────────────────────│
      0s                 2s             5s                      30s
                          remaining=28s  remaining=25s

A client trickling one byte every few seconds therefore cannot hold a
thread forever. When the budget is gone, the next read raises
TimeoutError.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"

# Upper bound on the post-response drain in close(), in time and bytes
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states (for logging and close bookkeeping)."""

    NEW = "new"                # Just accepted
    READING = "reading"        # Reading request head or body
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence started
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED HEADER READING                                          │
    │     └── TCP delivers bytes in arbitrary chunks                       │
    │     └── Keep reading until the blank line after the headers          │
    │                                                                      │
    │  2. ON-DEMAND BODY READING                                           │
    │     └── recv_some() is handed to the request as its body source      │
    │                                                                      │
    │  3. DEADLINE                                                         │
    │     └── One time budget for every read on this connection            │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── FIN, drain, close; never leak the file descriptor           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        buffer_size: Bytes requested per recv().
        max_header_size: Limit for the request line plus headers.
        timeout: Seconds from accept until reads give up (None = never).
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.monotonic)

    buffer_size: int = 4096
    max_header_size: int = 64 * 1024
    timeout: Optional[float] = 30.0

    def __post_init__(self):
        self.socket.setblocking(True)
        # Sends use the full timeout; reads override it with what is left
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def deadline(self) -> Optional[float]:
        """time.monotonic() value after which reads fail, or None."""
        if self.timeout is None:
            return None
        return self.created_at + self.timeout

    @property
    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative), or None."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    # =========================================================================
    # READING
    # =========================================================================

    def read_head(self) -> Optional[bytes]:
        """
        Read until the request head is complete.

        ┌─────────────────────────────────────────────────────────────────┐
        │   while no \\r\\n\\r\\n in buffer:                                  │
        │       recv() → buffer          (EOF → stop)                     │
        │       buffer > max_header_size → ValueError                     │
        └─────────────────────────────────────────────────────────────────┘

        Everything received is returned, including body bytes that arrived
        in the same packets as the headers.

        Returns:
            The buffered bytes, or None if the client closed the
            connection before sending anything.

        Raises:
            TimeoutError: The deadline passed first.
            ValueError: No blank line within max_header_size bytes.
            OSError: The connection failed.
        """
        self.state = ConnectionState.READING
        buffer = b""

        while HEADER_TERMINATOR not in buffer:
            chunk = self.recv_some(self.buffer_size)
            if not chunk:
                # EOF: hand over whatever arrived, the parser decides
                return buffer or None
            buffer += chunk

            header_end = buffer.find(HEADER_TERMINATOR)
            head_size = len(buffer) if header_end == -1 else header_end
            if head_size > self.max_header_size:
                raise ValueError(f"Request head too large: {head_size} bytes")

        return buffer

    def recv_some(self, size: int) -> bytes:
        """
        One recv() of at most `size` bytes within the deadline.

        Returns:
            Received bytes; b"" on EOF.

        Raises:
            TimeoutError: The deadline passed before any bytes arrived.
        """
        remaining = self.remaining
        if remaining is not None and remaining <= 0:
            raise TimeoutError(f"[{self.id}] Connection deadline exceeded")

        self.socket.settimeout(remaining)
        try:
            return self.socket.recv(min(size, self.buffer_size))
        except socket.timeout as e:
            raise TimeoutError(f"[{self.id}] Read timed out") from e
        finally:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response with sendall().

        Returns:
            True if sent, False if the client had already gone away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN: the client sees end-of-response
        2. drain whatever the client still sends, at most DRAIN_TIMEOUT
           seconds and DRAIN_LIMIT bytes in total
        3. close() releases the descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed")

    def _drain(self):
        """
        Discard unread client bytes so close() does not trigger a RST.

        ┌─────────────────────────────────────────────────────────────────┐
        │   cutoff = now + DRAIN_TIMEOUT                                  │
        │   while before cutoff and drained < DRAIN_LIMIT:                │
        │       recv() with timeout = time left until cutoff              │
        │       EOF / timeout / error → stop                              │
        └─────────────────────────────────────────────────────────────────┘

        A client that keeps trickling bytes is cut off at the cutoff.
        """
        cutoff = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                left = cutoff - time.monotonic()
                if left <= 0:
                    break
                self.socket.settimeout(left)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout or reset while draining

        if drained:
            logger.debug(f"[{self.id}] Drained {drained} unread bytes")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
