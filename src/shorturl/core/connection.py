"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for exactly one request/response
exchange.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    accept() ──► Connection ──► reader ──► RequestParser
                     │
                     ├── send_response(bytes)
                     │
                     └── close()

There is no keep-alive. Every response carries "Connection: close" and
the socket is shut down right after it is written. Anything the client
sends after the first request is drained and discarded.

=============================================================================
READING
=============================================================================

TCP is a byte stream: a request may arrive split across any number of
recv() calls. Instead of buffering by hand, the connection exposes a
buffered binary file over the socket:

    reader = sock.makefile("rb")

    reader.readline(limit)   ← one header line, capped
    reader.read(n)           ← exactly n body bytes (fewer only at EOF)

The parser pulls from it line by line, so it never has to look for the
end of the header block itself.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                                  │
     │             ▼                                  │
     └──────────► CLOSING ◄───────────────────────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Parser is pulling the request
    PROCESSING = "processing"  # Handler is executing
    WRITING = "writing"        # Sending response bytes
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A single client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds, None to block indefinitely.
    """

    # Caps on reading leftover client bytes during close()
    DRAIN_LIMIT = 64 * 1024
    DRAIN_TIMEOUT = 0.5

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # Accepted sockets can inherit the listener's polling timeout
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary stream over the socket.

        Created on first access. Reading from it marks the connection
        as READING.
        """
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        self.state = ConnectionState.READING
        return self._reader

    def mark_processing(self):
        """Request is parsed; the handler is about to run."""
        self.state = ConnectionState.PROCESSING

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so a full kernel buffer never truncates the
        response.

        Returns:
            True if the send succeeded, False if the client was gone.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        ┌─────────────────────────────────────────────────────────────────┐
        │   Server                              Client                    │
        │      │   FIN ──────────────────────────► │  (shutdown SHUT_WR)  │
        │      │ ◄───────────────────────── ACK    │                      │
        │      │ ◄───────────────────────── FIN    │  (client closes)     │
        │      │   ACK ──────────────────────────► │                      │
        └─────────────────────────────────────────────────────────────────┘

        Leftover client bytes are drained first (bounded, see _drain) so
        the kernel does not answer them with a RST that could clobber the
        response.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """
        Discard unread client bytes, up to DRAIN_LIMIT bytes or
        DRAIN_TIMEOUT seconds in total, whichever comes first.

        A client still streaming an oversized body is cut off here and
        gets a RST instead of holding the worker.
        """
        deadline = time.monotonic() + self.DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < self.DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(min(4096, self.DRAIN_LIMIT - drained))
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} unread bytes")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
            with Connection(sock, addr) as conn:
                request = parser.parse(conn.reader, conn.address)
                conn.send_response(response.to_bytes())
            # closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
