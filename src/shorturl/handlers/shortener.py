"""
=============================================================================
SHORTENER HANDLERS
=============================================================================

The application itself: what each request means for the store.

=============================================================================
ROUTES
=============================================================================

    ┌──────────┬──────────┬──────────────────────────────────────────────┐
    │ Method   │ Path     │ Behavior                                     │
    ├──────────┼──────────┼──────────────────────────────────────────────┤
    │ GET      │ /        │ 200 usage hint                               │
    │ GET      │ /:code   │ 302 → stored URL, or 303 → / if unknown      │
    │ POST     │ (any)    │ shorten the "url" field of the body          │
    │ (other)  │          │ 303 → /                                      │
    └──────────┴──────────┴──────────────────────────────────────────────┘

=============================================================================
POST FLOW
=============================================================================

    body ──► extract_url()
               │
               ├── None ──────────────────────────────► 400
               │
               ▼
             auth required?
               │
               ├── no secret configured ──────────────► 500
               ├── check_basic_auth() fails ──────────► 401 + WWW-Authenticate
               │
               ▼
             shorten_url()
               │
               ├── CollisionError ────────────────────► 500
               │
               └── code ──────────────────────────────► 200 "<code>"

=============================================================================
"""

import logging
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    bad_request,
    internal_error,
    ok,
    redirect,
    see_other,
    unauthorized,
)
from ..http.router import Router
from ..shortener.auth import check_basic_auth
from ..shortener.encoder import is_short_code
from ..shortener.shortener import DEFAULT_MAX_ATTEMPTS, CollisionError, shorten_url
from ..shortener.store import UrlStore


logger = logging.getLogger(__name__)


INDEX_HINT = (
    "URL shortener\n"
    "\n"
    "Shorten:  POST / with body {\"url\": \"https://example.com\"}\n"
    "Follow:   GET /<code>\n"
)

INVALID_URL_MESSAGE = 'Missing or invalid "url" field: expected an http:// or https:// URL'

ALLOWED_SCHEMES = ("http://", "https://")

_URL_KEY = '"url":'


def extract_url(body: str) -> Optional[str]:
    """
    Pull the "url" value out of a JSON-looking body.

    This is a substring scan, not a JSON parser:

        {"url":   "https://example.com"}
         ─────┬── ─┬──────────────────┬
              │    │                  └── up to the next quote
              │    └── optional whitespace, then a quote
              └── literal "url":

    Escaped quotes inside the value are not supported. The value must
    start with http:// or https:// and contain no control characters,
    since it is replayed verbatim in a Location header.

    Returns:
        The URL, or None if the field is missing or unacceptable.
    """
    start = body.find(_URL_KEY)
    if start == -1:
        return None

    rest = body[start + len(_URL_KEY):].lstrip()
    if not rest.startswith('"'):
        return None

    end = rest.find('"', 1)
    if end == -1:
        return None

    candidate = rest[1:end]
    if not candidate.startswith(ALLOWED_SCHEMES):
        return None
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in candidate):
        return None
    return candidate


class ShortenerHandler:
    """
    Request handlers for the shortener, bound to one store.

    Usage:
        store = UrlStore()
        handler = ShortenerHandler(store, auth_credentials="alice:wonderland")
        response = handler.handle(request)

    Args:
        store: Shared URL store (created once by the server).
        auth_credentials: Expected "user:password" for POSTs.
        require_auth: Gate POSTs behind Basic Authentication. When True and
                      no credentials are configured, every POST fails with
                      500 rather than running unauthenticated.
        max_attempts: Salted retries allowed after a collision.
    """

    def __init__(
        self,
        store: UrlStore,
        auth_credentials: str = "",
        require_auth: bool = True,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.store = store
        self.auth_credentials = auth_credentials
        self.require_auth = require_auth
        self.max_attempts = max_attempts

        self.router = Router(fallback=self.fallback)
        self.router.get("/")(self.index)
        self.router.get("/:code")(self.resolve)
        self.router.post("*")(self.create)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Entry point: route the request to one of the handlers below."""
        return self.router.handle(request)

    # =========================================================================
    # GET
    # =========================================================================

    def index(self, request: HTTPRequest) -> HTTPResponse:
        """GET / → usage hint."""
        return ok(INDEX_HINT)

    def resolve(self, request: HTTPRequest) -> HTTPResponse:
        """GET /:code → 302 to the stored URL, 303 to / otherwise."""
        code = request.path_params.get("code", "")
        if not is_short_code(code):
            return see_other("/")

        url = self.store.get(code)
        if url is None:
            logger.debug(f"Unknown short code: {code}")
            return see_other("/")
        return redirect(url)

    def fallback(self, request: HTTPRequest) -> HTTPResponse:
        """Anything unrouted goes back to the index."""
        return see_other("/")

    # =========================================================================
    # POST
    # =========================================================================

    def create(self, request: HTTPRequest) -> HTTPResponse:
        """POST (any path) → shorten the URL in the body."""
        url = extract_url(request.body)
        if url is None:
            return bad_request(INVALID_URL_MESSAGE)

        if self.require_auth:
            if not self.auth_credentials:
                logger.error("POST rejected: no auth credentials configured")
                return internal_error("Server authentication is not configured")
            if not check_basic_auth(request.headers, self.auth_credentials):
                logger.info(f"Authentication failed for {request.client_address[0] or 'unknown client'}")
                return unauthorized()

        try:
            code = shorten_url(url, self.store, self.max_attempts)
        except CollisionError as e:
            logger.error(f"Collision retries exhausted ({e.attempts}) for {url}")
            return internal_error("Could not allocate a short code")

        logger.info(f"Shortened {url} -> {code}")
        return ok(code)
