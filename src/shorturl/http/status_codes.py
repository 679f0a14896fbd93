"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this service can emit, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ Root hint page, or the short code for a created link      │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  302   │ Known short code → Location: <stored URL>                 │
    │  303   │ Unknown or malformed code → Location: /                   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Missing/invalid "url" field, or a malformed request       │
    │  401   │ Basic Authentication missing or wrong                     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ I/O failure, missing server secret, collisions exhausted  │
    │  503   │ Worker queue full (thread pool mode only)                 │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
INTERVIEW QUESTIONS ABOUT REDIRECTS
=============================================================================

Q: "Why 302 for a short link and not 301?"
A: "301 is cached by browsers forever. With 302 every click comes back to
   the shortener, so the mapping stays authoritative on the server."

Q: "Why 303 for an unknown code?"
A: "303 See Other always tells the client to follow up with a GET, which
   is exactly what we want when sending them back to the index page."

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.FOUND == 302
        True
        >>> HTTPStatus.FOUND.phrase
        'Found'
    """

    OK = 200                        # Hint page / created code

    FOUND = 302                     # Redirect to the stored URL
    SEE_OTHER = 303                 # Redirect back to /

    BAD_REQUEST = 400               # Bad input or malformed request
    UNAUTHORIZED = 401              # Credentials missing or wrong

    INTERNAL_SERVER_ERROR = 500     # I/O error, misconfiguration, collisions
    SERVICE_UNAVAILABLE = 503       # Worker queue full

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 302 Found
                     ─── ─────
                      │    └── phrase
                      └─────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_redirect(self) -> bool:
        """Check if this is a 3xx status code."""
        return 300 <= self < 400

    @property
    def is_error(self) -> bool:
        """Check if this is a 4xx or 5xx status code."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
