"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ShortenerHandler (shortener.py)                                     │
    │   GET /, GET /:code, POST → index, redirect, create                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ response_for_parse_error (errors.py)                                │
    │   HTTPParseError → 400 / 500                                        │
    └─────────────────────────────────────────────────────────────────────┘

Usage:
    from shorturl.handlers import ShortenerHandler
    from shorturl.shortener import UrlStore

    handler = ShortenerHandler(UrlStore(), auth_credentials="user:pass")
    response = handler.handle(request)
"""

from .shortener import ShortenerHandler, extract_url, INDEX_HINT, INVALID_URL_MESSAGE
from .errors import response_for_parse_error

__all__ = [
    "ShortenerHandler",
    "extract_url",
    "response_for_parse_error",
    "INDEX_HINT",
    "INVALID_URL_MESSAGE",
]
