"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Translates between bytes on a connection and Python objects.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   stream → HTTPRequest, or HTTPParseError with a ParseErrorKind     │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE BUILDER (response.py)                                      │
    │   HTTPResponse / ResponseBuilder → bytes                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   (method, path) → handler, with a fallback for everything else     │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   the handful of codes this service emits                           │
    └─────────────────────────────────────────────────────────────────────┘

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    POST / HTTP/1.1\\r\\n                HTTP/1.1 200 OK\\r\\n
    Authorization: Basic ...\\r\\n       Content-Type: text/plain\\r\\n
    Content-Length: 31\\r\\n             Content-Length: 7\\r\\n
    \\r\\n                                \\r\\n
    {"url": "https://example.com"}    4xq9Tb2

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    ParseErrorKind,
    Method,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    redirect,            # 302 Found
    see_other,           # 303 See Other
    bad_request,         # 400 Bad Request
    unauthorized,        # 401 Unauthorized
    internal_error,      # 500 Internal Server Error
    service_unavailable, # 503 Service Unavailable
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "ParseErrorKind",
    "Method",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "redirect",
    "see_other",
    "bad_request",
    "unauthorized",
    "internal_error",
    "service_unavailable",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
