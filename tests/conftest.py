"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shorturl import ShortenerServer, ServerConfig
from shorturl.handlers import ShortenerHandler
from shorturl.shortener import UrlStore


CREDENTIALS = "alice:wonderland"
AUTH_HEADER = "Basic YWxpY2U6d29uZGVybGFuZA=="


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for a short code."""
    return (
        b"GET /4xq9Tb2 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample authenticated shorten request."""
    body = b'{"url": "https://example.com"}'
    return (
        b"POST / HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        + f"Authorization: {AUTH_HEADER}\r\n".encode()
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def store() -> UrlStore:
    return UrlStore()


@pytest.fixture
def handler(store: UrlStore) -> ShortenerHandler:
    """Handler requiring alice:wonderland for POSTs."""
    return ShortenerHandler(store, auth_credentials=CREDENTIALS)


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        auth_credentials=CREDENTIALS,
        log_level="WARNING",
        access_log=False,
    )


class RunningServer:
    """Runs a ShortenerServer in a background thread."""

    def __init__(self, server: ShortenerServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, return everything the server sends back."""
        with socket.create_connection(self.address, timeout=5.0) as s:
            s.sendall(raw)
            s.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A sequential server on a free port."""
    srv = RunningServer(ShortenerServer(config))
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def pooled_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A server with worker threads."""
    config.workers = 4
    srv = RunningServer(ShortenerServer(config))
    srv.start()

    yield srv

    srv.stop()
