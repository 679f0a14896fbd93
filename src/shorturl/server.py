"""
=============================================================================
SHORTENER SERVER
=============================================================================

Ties the pieces together: socket server, optional thread pool, request
parser, middleware and the shortener handlers around one shared store.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ShortenerServer                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   SocketServer ──accept──► _handle_connection(conn)                 │
    │                               │                                     │
    │                 workers == 0  │  workers > 0                        │
    │                 ┌─────────────┴─────────────┐                       │
    │                 ▼                           ▼                       │
    │            run inline               ThreadPool.submit()             │
    │                 │                    (full → 503)                   │
    │                 └─────────────┬─────────────┘                       │
    │                               ▼                                     │
    │                    _process_connection(conn)                        │
    │                               │                                     │
    │        RequestParser ──► LoggingMiddleware ──► ShortenerHandler     │
    │                                                       │             │
    │                                                    UrlStore         │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the TCP connection
    2. Connection is handled inline, or queued in the ThreadPool
    3. RequestParser pulls one request off the socket
       └── HTTPParseError → 400/500 straight away
    4. Middleware pipeline → Router → handler
       └── unexpected exception → 500
    5. Response gets "Connection: close", is serialized and sent
    6. Connection is closed

=============================================================================
INTERVIEW QUESTIONS ABOUT THIS SERVER
=============================================================================

Q: "What happens when two clients shorten URLs at the same time?"
A: "The whole lookup/collision/insert loop runs under the store's lock,
   so the second POST sees the first one's entry. Two different URLs
   can never end up sharing a code."

Q: "What does a slow client cost?"
A: "With workers == 0, everything: the accept loop is busy with it until
   it finishes or the read timeout fires. With a pool, one worker."

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .handlers import ShortenerHandler, response_for_parse_error
from .http import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    ParseErrorKind,
    HTTPResponse,
    internal_error,
    service_unavailable,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware
from .shortener import UrlStore


logger = logging.getLogger(__name__)


class ShortenerServer:
    """
    The URL shortener service.

    Usage:
        config = ServerConfig.from_env()
        server = ShortenerServer(config)
        server.run()            # blocks until SIGINT/SIGTERM

    In tests, run it on a background thread:
        server = ShortenerServer(ServerConfig(port=0, auth_credentials="a:b"))
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, store: Optional[UrlStore] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.
            store: Store to serve from. A fresh empty one if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)

        self._thread_pool: Optional[ThreadPool] = None
        if self.config.workers > 0:
            self._thread_pool = ThreadPool(
                workers=self.config.workers,
                queue_size=self.config.queue_size,
            )

        self._parser = RequestParser(
            max_header_size=self.config.max_header_size,
            max_body_size=self.config.max_body_size,
        )

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self.store = store if store is not None else UrlStore()
        self.shortener = ShortenerHandler(
            self.store,
            auth_credentials=self.config.auth_credentials,
            require_auth=self.config.require_auth,
            max_attempts=self.config.max_attempts,
        )

        self._middleware = MiddlewarePipeline()
        if self.config.access_log:
            self.use(LoggingMiddleware())

        # Built in run(), once all middleware is registered
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "ShortenerServer":
        """Add middleware. Only effective before run()."""
        self._middleware.add(middleware)
        return self

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once the server is listening."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start serving (blocking).

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        self._setup_logging()

        if self.config.require_auth and not self.config.auth_credentials:
            logger.warning(
                "Authentication is required but SHORTURL_AUTH is not set; "
                "every POST will fail with 500"
            )

        self._handler = self._middleware.wrap(self.shortener.handle)

        if self._thread_pool is not None:
            self._thread_pool.start()

        mode = f"{self.config.workers} workers" if self._thread_pool else "sequential"
        logger.info(f"Starting URL shortener on {self.config.host}:{self.config.port} ({mode})")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the server to stop. Returns immediately; run() unwinds."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("shorturl").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")

        if self._thread_pool is not None:
            self._thread_pool.shutdown(wait=True, timeout=30.0)

        logger.info(f"Server stopped ({len(self.store)} short codes in memory)")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer for every accepted connection."""
        if self._thread_pool is None:
            self._process_connection(conn)
            return

        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            with conn:
                self._send(conn, service_unavailable())

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.

            parse ──► HTTPParseError? ──► 400 / 500
              │
              ▼
            handler ──► exception? ──► 500
              │
              ▼
            send
        """
        with conn:
            try:
                request = self._parser.parse(conn.reader, conn.address)
            except HTTPParseError as e:
                self._log_parse_error(conn, e)
                self._send(conn, response_for_parse_error(e))
                return

            conn.mark_processing()

            try:
                response = self._handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error()

            self._send(conn, response)

    def _send(self, conn: Connection, response: HTTPResponse) -> bool:
        # Serialized in full before anything goes on the wire
        response.set_header("Connection", "close")
        return conn.send_response(response.to_bytes(self.config.server_name))

    @staticmethod
    def _log_parse_error(conn: Connection, error: HTTPParseError):
        message = f"[{conn.id}] {conn.client_ip}: {error}"
        if error.kind is ParseErrorKind.IO_ERROR:
            logger.error(message)
        elif error.kind is ParseErrorKind.CONNECTION_CLOSED:
            logger.debug(message)
        else:
            logger.warning(message)

