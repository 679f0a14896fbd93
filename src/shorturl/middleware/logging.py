"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One line per handled request on the "shorturl.access" logger, in a
shape close to the Apache access log:

    127.0.0.1 - - [19/Oct/2026:10:42:07 +0000] "POST /" 200 7 0.41ms
    ─────┬───      ────────────┬─────────────  ───┬───  ─┬─ ┬ ──┬───
         │                     │                  │      │  │   └── time in handler
         │                     │                  │      │  └── response body bytes
         │                     │                  │      └── status
         │                     │                  └── method + path
         │                     └── local time
         └── client address

Requests rejected by the parser never reach the middleware; the server
logs those itself.

=============================================================================
INTERVIEW QUESTIONS ABOUT LOGGING
=============================================================================

Q: "What should an access log NOT contain?"
A: "Credentials and request bodies. Here that means no Authorization
   header and no submitted URLs in the access line; the path is enough
   to see which short code was followed."

Q: "Why a dedicated logger name for access lines?"
A: "So they can be routed or silenced on their own, e.g.
   logging.getLogger('shorturl.access').setLevel(logging.WARNING)."

=============================================================================
"""

import time
import logging
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("shorturl.access")


@dataclass
class RequestLog:
    """One access-log entry."""
    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Access logging.

    Should be first in the pipeline so its timing covers everything
    after it.

    Args:
        log_level: Level for access lines (default INFO).
    """

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method.value} {request.path} "
                f"- {type(e).__name__} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        entry = RequestLog(
            method=request.method.value,
            path=request.path,
            client_ip=request.client_address[0] or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )
        logger.log(self.log_level, entry.to_text())

        return response
