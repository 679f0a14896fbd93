"""
Socket-level tests against a real server on a free port.
"""

import socket
import threading
import time

import pytest

from shorturl.shortener import encode

AUTH_HEADER = "Basic YWxpY2U6d29uZGVybGFuZA=="  # alice:wonderland


def _post(body: bytes, auth: bool = True) -> bytes:
    head = b"POST / HTTP/1.1\r\nHost: localhost\r\n"
    if auth:
        head += f"Authorization: {AUTH_HEADER}\r\n".encode()
    head += f"Content-Length: {len(body)}\r\n\r\n".encode()
    return head + body


def _parse(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name.lower()] = value
    return status, headers, body


class TestShortenerServer:

    def test_index(self, running_server):
        status, headers, body = _parse(running_server.request(b"GET / HTTP/1.1\r\n\r\n"))

        assert status == 200
        assert headers["content-type"] == "text/plain"
        assert headers["connection"] == "close"
        assert headers["content-length"] == str(len(body))
        assert "date" in headers
        assert "server" in headers

    def test_shorten_and_follow(self, running_server):
        status, _, body = _parse(running_server.request(_post(b'{"url": "https://example.com"}')))

        assert status == 200
        code = body.decode()
        assert code == encode("https://example.com")

        status, headers, body = _parse(running_server.request(f"GET /{code} HTTP/1.1\r\n\r\n".encode()))

        assert status == 302
        assert headers["location"] == "https://example.com"
        assert headers["content-length"] == "0"
        assert body == b""

    def test_unknown_code(self, running_server):
        status, headers, _ = _parse(running_server.request(b"GET /zzzzzzz HTTP/1.1\r\n\r\n"))

        assert status == 303
        assert headers["location"] == "/"

    def test_unauthenticated_post(self, running_server):
        status, headers, _ = _parse(running_server.request(
            _post(b'{"url": "https://example.com"}', auth=False)
        ))

        assert status == 401
        assert headers["www-authenticate"] == "Basic"

    def test_invalid_url(self, running_server):
        status, _, _ = _parse(running_server.request(_post(b'{"url": "mailto:x@example.com"}')))

        assert status == 400

    def test_header_injection_refused(self, running_server):
        status, _, _ = _parse(running_server.request(
            _post(b'{"url": "https://example.com\r\nSet-Cookie: pwned=1"}')
        ))

        assert status == 400
        assert len(running_server.server.store) == 0

    def test_malformed_request_line(self, running_server):
        status, headers, body = _parse(running_server.request(b"GET\r\n"))

        assert status == 400
        assert headers["connection"] == "close"
        assert body

    def test_invalid_method(self, running_server):
        status, _, _ = _parse(running_server.request(b"DELETE / HTTP/1.1\r\n\r\n"))

        assert status == 400

    def test_oversized_body(self, running_server):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 999999999\r\n\r\n"
        status, _, _ = _parse(running_server.request(raw))

        assert status == 400

    def test_streaming_oversized_body_does_not_stall_others(self, running_server):
        stop = threading.Event()
        sock = socket.create_connection(running_server.address, timeout=5.0)

        def stream():
            try:
                sock.sendall(b"POST / HTTP/1.1\r\nContent-Length: 999999999\r\n\r\n")
                while not stop.is_set():
                    sock.sendall(b"x" * 4096)
            except OSError:
                pass

        writer = threading.Thread(target=stream, daemon=True)
        writer.start()
        try:
            time.sleep(0.1)
            started = time.monotonic()
            status, _, _ = _parse(running_server.request(b"GET / HTTP/1.1\r\n\r\n"))
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            sock.close()
            writer.join(2.0)

        assert status == 200
        assert elapsed < 2.0

    def test_one_request_per_connection(self, running_server):
        raw = b"GET / HTTP/1.1\r\n\r\nGET / HTTP/1.1\r\n\r\n"
        response = running_server.request(raw)

        assert response.count(b"HTTP/1.1 ") == 1

    def test_server_survives_abrupt_client(self, running_server):
        with socket.create_connection(running_server.address, timeout=5.0) as s:
            s.sendall(b"GET / HT")

        status, _, _ = _parse(running_server.request(b"GET / HTTP/1.1\r\n\r\n"))

        assert status == 200


class TestPooledServer:

    def test_concurrent_posts_share_a_code(self, pooled_server):
        results = []
        lock = threading.Lock()

        def client():
            status, _, body = _parse(pooled_server.request(_post(b'{"url": "https://example.com/pool"}')))
            with lock:
                results.append((status, body))

        threads = [threading.Thread(target=client) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10.0)

        assert len(results) == 8
        assert {status for status, _ in results} == {200}
        assert len({body for _, body in results}) == 1
        assert len(pooled_server.server.store) == 1


class TestNoSecret:

    @pytest.fixture
    def config(self, config):
        config.auth_credentials = ""
        return config

    def test_post_fails_closed(self, running_server):
        status, _, _ = _parse(running_server.request(_post(b'{"url": "https://example.com"}')))

        assert status == 500
