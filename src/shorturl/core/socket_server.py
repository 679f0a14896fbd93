"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Listens on one address and hands every accepted client socket, wrapped
in a Connection, to a callback.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a TCP socket
    2. bind()      Associate it with IP:PORT (port 0 = let the OS pick)
    3. listen()    OS starts queueing incoming connections
    4. accept()    Returns a NEW socket per client; the listener keeps going
    5. close()     Release the listener on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once in start()
                    └───────────┬───────────┘
                                │
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Connection│         │ Connection│         │ Connection│
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
SHUTDOWN
=============================================================================

accept() runs with a 1 second timeout so the loop can notice that
shutdown() was called:

    while running:
        try:
            accept()          # at most 1 second
        except timeout:
            continue          # re-check the flag

SIGINT and SIGTERM trigger shutdown() when the server runs on the main
thread. Python only allows signal handlers there, so a server started
from a background thread (tests, embedding) skips them.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

        __init__()        Store config
            │
            ▼
        start(handler)    create → bind → listen → signals → accept loop
            │
            └──► for each client: handler(Connection(...))

        shutdown()        Flip the running flag; the loop exits within
                          one poll interval

    Usage:
        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address the server is bound to.

        After start() this is the real address, so a configured port of 0
        reports the port the OS actually assigned.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" while the old socket sits in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are small and written once
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that call shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown().

        This method BLOCKS.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        ┌─────────────────────────────────────────────────────────────────┐
        │   while self._running:                                          │
        │       accept() ──► Connection(sock, addr) ──► handler(conn)     │
        │       timeout  ──► continue                                     │
        │       OSError  ──► log if still running, stop                   │
        └─────────────────────────────────────────────────────────────────┘
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from a signal handler or another thread, and safe to
        call more than once.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)
