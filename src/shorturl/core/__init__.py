"""
Core server components: socket handling and concurrency.

    SocketServer   listening socket + accept loop
    Connection     one accepted client, one request
    ThreadPool     optional worker threads behind a bounded queue
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool, Worker, Task

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
    "Worker",
    "Task",
]
