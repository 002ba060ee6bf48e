"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the server lives in one ServerConfig object. It is built
once at startup and handed explicitly to the server and the file handler;
nothing in the request path reads globals or the environment.

=============================================================================
WHERE VALUES COME FROM
=============================================================================

    ┌──────────────────────┐   ┌──────────────────────┐   ┌──────────────┐
    │ CLI flags            │ > │ Environment (HTTP_*) │ > │ Defaults     │
    │ --directory /tmp/x   │   │ HTTP_DIRECTORY=/srv  │   │ 0.0.0.0:4221 │
    └──────────────────────┘   └──────────────────────┘   └──────────────┘

    The CLI (__main__.py) starts from ServerConfig.from_env() and
    overrides only the flags that were actually given.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 4221

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog

    REQUEST LIMITS
    - buffer_size, max_header_size, timeout

    FILES
    - directory

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = DEFAULT_HOST
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = DEFAULT_PORT
    """
    The port number to listen on.
    0 asks the OS for a free port (used by the test suite); the port
    actually bound is available from the server after startup.
    """

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 4096
    """Bytes requested per recv() call."""

    max_header_size: int = 64 * 1024
    """
    Upper bound on the request line plus headers, in bytes.
    A client that sends more without a blank line gets 400.
    """

    timeout: Optional[float] = 30.0
    """
    Per-connection deadline in seconds, counted from accept.
    All reads for one request share this budget; sends use it as a
    plain socket timeout. None disables it (blocking sockets).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root directory for /files/{name}.
    None leaves the file routes unconfigured: GET answers 404,
    POST answers 500.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST       Server host (default: 0.0.0.0)
        HTTP_PORT       Server port (default: 4221)
        HTTP_DIRECTORY  Root for /files/ (default: unset)
        HTTP_TIMEOUT    Per-connection deadline in seconds (default: 30)
        HTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        USAGE
        =====================================================================

        # From shell:
        HTTP_DIRECTORY=/tmp/data HTTP_LOG_LEVEL=DEBUG python -m tinyhttpd

        =====================================================================

        Raises:
            ValueError: If HTTP_PORT or HTTP_TIMEOUT is not a number.
        """
        return cls(
            host=os.getenv("HTTP_HOST", DEFAULT_HOST),
            port=int(os.getenv("HTTP_PORT", str(DEFAULT_PORT))),
            directory=os.getenv("HTTP_DIRECTORY") or None,
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer.__init__, so a bad value fails at startup
        rather than on the first request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_header_size < self.buffer_size:
            raise ValueError("max_header_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with dataclass
# 2. Environment variable support (HTTP_*)
# 3. Validation at startup (fail-fast)
# 4. Defaults match the classic setup: 0.0.0.0:4221, no file root
# =============================================================================
