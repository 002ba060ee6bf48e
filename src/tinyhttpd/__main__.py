"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

    # Defaults: 0.0.0.0:4221, file routes disabled
    python -m tinyhttpd

    # Serve and accept files under /tmp/data
    python -m tinyhttpd --directory /tmp/data

    # Same thing via the console script
    tinyhttpd -d /tmp/data --log-level DEBUG

=============================================================================
WHERE SETTINGS COME FROM
=============================================================================

1. ServerConfig.from_env() reads HTTP_* environment variables
2. Every flag that was given on the command line overrides its field
3. HTTPServer validates the result and runs

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server: echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                          # 0.0.0.0:4221
  python -m tinyhttpd --directory /tmp/data    # enable /files/
  python -m tinyhttpd --port 8080 -l DEBUG     # other port, verbose
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Root directory for /files/ (default: $HTTP_DIRECTORY, else disabled)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection deadline in seconds (default: 30)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with the given flags applied on top."""
    config = ServerConfig.from_env()

    for name in ("directory", "host", "port", "timeout", "log_level"):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code: 0 after a clean shutdown, 1 on a startup error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
