"""
=============================================================================
URL SHORTENER CLI ENTRY POINT
=============================================================================

    # Defaults (127.0.0.1:8080, sequential, auth required)
    SHORTURL_AUTH=alice:wonderland python -m shorturl

    # Custom port, four worker threads
    SHORTURL_AUTH=alice:wonderland python -m shorturl --port 3000 --workers 4

    # Local experiments without credentials
    python -m shorturl --no-auth --log-level DEBUG

Flags override environment variables, which override the defaults. The
credentials are only read from SHORTURL_AUTH.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .server import ShortenerServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shorturl",
        description="Minimal URL shortening HTTP service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  SHORTURL_AUTH           user:password required for POST (Basic Auth)
  SHORTURL_HOST           bind address
  SHORTURL_PORT           bind port
  SHORTURL_WORKERS        worker threads (0 = sequential)
  SHORTURL_TIMEOUT        client read timeout in seconds
  SHORTURL_MAX_BODY_SIZE  largest accepted request body in bytes
  SHORTURL_REQUIRE_AUTH   set to false to accept unauthenticated POSTs
  SHORTURL_LOG_LEVEL      logging level
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────
    # Defaults are None so that unset flags fall through to the environment

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Worker threads; 0 handles connections one at a time (default: 0)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Client read timeout in seconds (default: none)"
    )
    parser.add_argument(
        "--max-body-size",
        type=int,
        default=None,
        help="Largest accepted request body in bytes (default: 102400)"
    )
    parser.add_argument(
        "--no-auth",
        action="store_true",
        help="Accept POSTs without Basic Authentication"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"shorturl {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment config with any explicitly given flags applied on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.workers = args.workers
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.max_body_size is not None:
        config.max_body_size = args.max_body_size
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.no_auth:
        config.require_auth = False

    return config


def main(argv: Optional[List[str]] = None):
    """CLI entry point: parse flags, build the server, serve until stopped."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        server = ShortenerServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
