"""
=============================================================================
SHORTURL - Minimal URL Shortening HTTP Service
=============================================================================

Turns long http(s) URLs into short Base62 codes and redirects visitors
from the code back to the URL. Runs on raw sockets with a small HTTP/1.1
parser of its own; everything is kept in memory.

    POST /  {"url": "https://example.com"}   ──►  200  "4xq9Tb2"
    GET  /4xq9Tb2                            ──►  302  Location: https://example.com

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    shorturl/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m shorturl)
    ├── server.py            # ShortenerServer
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Sockets and concurrency
    │   ├── socket_server.py # Accept loop, signals
    │   ├── connection.py    # One client connection
    │   └── thread_pool.py   # Optional worker threads
    ├── http/                # HTTP protocol
    │   ├── request.py       # Request parser + HTTPParseError
    │   ├── response.py      # Response building
    │   ├── router.py        # Routing with a fallback
    │   └── status_codes.py  # Status enum
    ├── middleware/          # Access logging
    ├── handlers/            # GET /, GET /:code, POST
    └── shortener/           # Domain logic
        ├── encoder.py       # SHA-256 → Base62 short codes
        ├── shortener.py     # Collision-resolving shorten_url()
        ├── store.py         # Locked in-memory code → URL map
        └── auth.py          # Basic Authentication check

=============================================================================
QUICK START
=============================================================================

    from shorturl import ShortenerServer, ServerConfig

    server = ShortenerServer(ServerConfig(auth_credentials="alice:wonderland"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"
__author__ = "shorturl contributors"

from .config import ServerConfig
from .server import ShortenerServer
from .shortener import UrlStore, shorten_url, encode, CollisionError

__all__ = [
    "ShortenerServer",
    "ServerConfig",
    "UrlStore",
    "shorten_url",
    "encode",
    "CollisionError",
    "__version__",
]
