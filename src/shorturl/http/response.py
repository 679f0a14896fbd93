"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 302 Found\r\n                  ← status line             │
    │   Location: https://example.com\r\n       ← headers                 │
    │   Content-Length: 0\r\n                                             │
    │   Date: Wed, 01 Jan 2026 12:00:00 GMT\r\n                           │
    │   Server: ShortURL/1.0\r\n                                          │
    │   Connection: close\r\n                                             │
    │   \r\n                                    ← end of headers          │
    │   [body]                                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every response in this service is plain text (or empty). A response is
always fully built before a single byte goes out on the socket, so a
client never sees half a status line followed by an error.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Use ResponseBuilder or the convenience functions below rather than
    filling in headers by hand.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 303 See Other"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self, server_name: str = "ShortURL/1.0") -> bytes:
        """
        Serialize the response.

        =====================================================================
        AUTO-ADDED HEADERS
        =====================================================================

            Content-Length   always, from the body
            Date             RFC 7231 HTTP-date, UTC
            Server           server_name

        Headers already present are left alone.
        =====================================================================
        """
        response_headers = dict(self.headers)

        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.UNAUTHORIZED)
            .header("WWW-Authenticate", "Basic")
            .text("Unauthorized")
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """
        Set a plain-text body.

        Content-Type is only set for a non-empty body; an empty text leaves
        the response without Content-Type.
        """
        self._body = text.encode("utf-8")
        if self._body:
            self._headers["Content-Type"] = TEXT_PLAIN
        else:
            self._headers.pop("Content-Type", None)
        return self

    def redirect(self, location: str, status: HTTPStatus = HTTPStatus.FOUND) -> "ResponseBuilder":
        """
        Make this a redirect.

        302 Found sends the client to a stored URL; 303 See Other sends it
        back to a page it should GET.
        """
        self._status = status
        self._headers["Location"] = location
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: "Wed, 01 Jan 2026 12:00:00 GMT". Always GMT.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for every response the shortener produces:
#
#     return ok("4xq9Tb2")
#     return redirect("https://example.com")
#     return see_other("/")
#     return unauthorized()
#
# =============================================================================

def ok(body: Union[str, bytes] = "") -> HTTPResponse:
    """200 OK with a plain-text body."""
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return ResponseBuilder().status(HTTPStatus.OK).text(body).build()


def redirect(location: str) -> HTTPResponse:
    """302 Found pointing at `location`, no body."""
    return ResponseBuilder().redirect(location, HTTPStatus.FOUND).build()


def see_other(location: str = "/") -> HTTPResponse:
    """303 See Other pointing at `location`, no body."""
    return ResponseBuilder().redirect(location, HTTPStatus.SEE_OTHER).build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400 Bad Request with a plain-text explanation."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).text(message).build()


def unauthorized(message: str = "Unauthorized", realm: Optional[str] = None) -> HTTPResponse:
    """
    401 Unauthorized with a Basic challenge.

    The WWW-Authenticate header tells the client which scheme to use;
    browsers show their login prompt when they see it.
    """
    challenge = "Basic" if realm is None else f'Basic realm="{realm}"'
    return (ResponseBuilder()
        .status(HTTPStatus.UNAUTHORIZED)
        .header("WWW-Authenticate", challenge)
        .text(message)
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500 Internal Server Error. Keep the message free of internals."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).text(message).build()


def service_unavailable(message: str = "Server overloaded") -> HTTPResponse:
    """503 Service Unavailable, used when the worker queue is full."""
    return ResponseBuilder().status(HTTPStatus.SERVICE_UNAVAILABLE).text(message).build()
