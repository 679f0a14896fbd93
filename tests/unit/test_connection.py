"""
Unit tests for the connection wrapper.
"""

import socket
import threading
import time

from shorturl.core.connection import Connection, ConnectionState


def _stream_forever(sock: socket.socket, stop: threading.Event):
    chunk = b"x" * 4096
    try:
        while not stop.is_set():
            sock.sendall(chunk)
    except OSError:
        pass


class TestConnectionClose:

    def test_close_bounded_against_streaming_client(self):
        server_sock, client_sock = socket.socketpair()
        stop = threading.Event()
        writer = threading.Thread(target=_stream_forever, args=(client_sock, stop), daemon=True)
        writer.start()

        conn = Connection(socket=server_sock, address=("127.0.0.1", 0))
        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started

        stop.set()
        client_sock.close()
        writer.join(2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < Connection.DRAIN_TIMEOUT + 1.0

    def test_close_bounded_against_idle_client(self):
        server_sock, client_sock = socket.socketpair()

        conn = Connection(socket=server_sock, address=("127.0.0.1", 0))
        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started
        client_sock.close()

        assert elapsed < Connection.DRAIN_TIMEOUT + 1.0

    def test_close_twice(self):
        server_sock, client_sock = socket.socketpair()
        client_sock.close()

        conn = Connection(socket=server_sock, address=("127.0.0.1", 0))
        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_peer_gone(self):
        server_sock, client_sock = socket.socketpair()
        client_sock.close()

        with Connection(socket=server_sock, address=("127.0.0.1", 0)) as conn:
            # The first write may still land in the kernel buffer
            conn.send_response(b"x")
            time.sleep(0.05)
            assert conn.send_response(b"x" * 65536) is False
