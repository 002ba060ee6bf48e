"""
=============================================================================
HTTP SERVER
=============================================================================

Wires the pieces together: socket server, one thread per connection,
parser, middleware, router.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Client                                                             │
    │     │  TCP connect                                                   │
    │     ▼                                                                │
    │   SocketServer.accept() ──► Connection                               │
    │     │                                                                │
    │     │  threading.Thread(target=_process_connection)                  │
    │     ▼                                                                │
    │   conn.read_head()          bytes up to \\r\\n\\r\\n (+ early body)      │
    │     │                                                                │
    │     ▼                                                                │
    │   RequestParser.parse()     HTTPParseError ──► 400                   │
    │     │                                                                │
    │     ▼                                                                │
    │   LoggingMiddleware ──► Router ──► handler                           │
    │     │                              (exception ──► 500)               │
    │     ▼                                                                │
    │   response.to_bytes() ──► conn.send_response() ──► conn.close()      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Exactly one request per connection. Whatever happens inside one worker
thread, the accept loop and every other connection carry on.

=============================================================================
FAILURES BEFORE THE HANDLER
=============================================================================

    ┌─────────────────────────────────────┬───────────────────────────────┐
    │ What happened                       │ Client sees                   │
    ├─────────────────────────────────────┼───────────────────────────────┤
    │ Client closed without sending       │ nothing (connection closed)   │
    │ Deadline hit while reading headers  │ nothing (connection closed)   │
    │ Header block over max_header_size   │ 400                           │
    │ Malformed request line              │ 400                           │
    │ Handler raised                      │ 500                           │
    └─────────────────────────────────────┴───────────────────────────────┘

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional, Set, Tuple

from .config import ServerConfig
from .core import Connection, SocketServer
from .handlers import build_router
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    Router,
    bad_request,
    internal_error,
)
from .middleware import LoggingMiddleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


# Upper bound on waiting for in-flight connections at shutdown
SHUTDOWN_JOIN_TIMEOUT = 5.0


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(directory="/tmp/data")
        server = HTTPServer(config)
        server.run()            # Blocks until SIGINT/SIGTERM or shutdown()

    From another thread (tests, embedding):

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready()
        host, port = server.address
        ...
        server.shutdown()
        thread.join()

    =========================================================================
    ARCHITECTURE
    =========================================================================

    - ServerConfig: validated once, read-only afterwards
    - SocketServer: listening socket and accept loop
    - RequestParser: raw bytes → HTTPRequest
    - Router: the fixed route table from build_router()
    - MiddlewarePipeline: access logging around the router

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            router: Route table. Defaults to build_router(config).

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        self._router = router or build_router(self.config)
        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware())

        # Built in run(): middleware wrapped around router.handle
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        # Live worker threads, only tracked so shutdown can join them
        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once the server is ready."""
        return self._socket_server.address

    @property
    def active_connections(self) -> int:
        with self._workers_lock:
            return len(self._workers)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() or SIGINT/SIGTERM, once in-flight
        connections have finished or SHUTDOWN_JOIN_TIMEOUT has passed.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")
        else:
            logger.info("No --directory given, file routes are disabled")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._socket_server.ready.wait(timeout)

    def shutdown(self):
        """Ask the accept loop to stop; run() then finishes the shutdown."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("tinyhttpd").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        1. Accept loop has already stopped and the listening socket is closed
        2. Join live workers, bounded by SHUTDOWN_JOIN_TIMEOUT overall
        """
        logger.info("Shutting down server...")
        self._socket_server.shutdown()

        with self._workers_lock:
            workers = list(self._workers)

        if workers:
            logger.info(f"Waiting for {len(workers)} connection(s) to finish")

        per_worker = SHUTDOWN_JOIN_TIMEOUT / max(len(workers), 1)
        for worker in workers:
            worker.join(per_worker)

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for `conn` (called from the accept loop)."""
        worker = threading.Thread(
            target=self._run_worker,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers.add(worker)
        worker.start()

    def _run_worker(self, conn: Connection):
        try:
            self._process_connection(conn)
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def _process_connection(self, conn: Connection):
        """
        Handle the single request on `conn` (runs in the worker thread).

        Never raises: every failure is logged and the connection closed.
        """
        with conn:
            # ─────────────────────────────────────────────────────────────
            # READ REQUEST HEAD
            # ─────────────────────────────────────────────────────────────
            try:
                raw_request = conn.read_head()
            except TimeoutError:
                logger.info(f"[{conn.id}] Timed out waiting for request headers")
                return
            except ValueError as e:
                logger.warning(f"[{conn.id}] {e}")
                conn.send_response(bad_request().to_bytes())
                return
            except OSError as e:
                logger.info(f"[{conn.id}] Read failed: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed before sending a request")
                return

            # ─────────────────────────────────────────────────────────────
            # PARSE
            # ─────────────────────────────────────────────────────────────
            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request: {e}")
                conn.send_response(bad_request().to_bytes())
                return

            request.body_source = conn.recv_some

            # ─────────────────────────────────────────────────────────────
            # DISPATCH (middleware + router)
            # ─────────────────────────────────────────────────────────────
            try:
                response = self._handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error()

            conn.send_response(response.to_bytes())


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Component wiring: config, socket server, parser, router, middleware
# 2. Request flow: Accept → Thread → Read → Parse → Middleware → Route → Send
# 3. One request per connection, always closed afterwards
# 4. Lifecycle: startup, signal-driven shutdown, bounded worker join
# =============================================================================
