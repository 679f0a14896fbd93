"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Middleware wraps the request handler like layers of an onion:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Request ───────────────────────────────────────────────►          │
    │                                                                     │
    │   ┌──────────┐    ┌──────────┐    ┌──────────────────┐              │
    │   │   MW 1   │───►│   MW 2   │───►│ ShortenerHandler │              │
    │   └──────────┘    └──────────┘    └──────────────────┘              │
    │                                                                     │
    │   ◄─────────────────────────────────────────────── Response         │
    └─────────────────────────────────────────────────────────────────────┘

Each middleware gets the request plus `next`, the rest of the chain. It
can act before calling next, after it, or return without calling it at
all.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next middleware, or the final handler
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                started = time.time()
                response = next(request)
                response.set_header("X-Elapsed", f"{time.time() - started:.3f}")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """Process the request, normally by calling next(request)."""
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(shortener.handle)

    First added = outermost.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain.

        Given [MW1, MW2] and handler, wraps in reverse:

            current = handler
            current = MW2 → handler
            current = MW1 → MW2 → handler
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    @staticmethod
    def _create_wrapped_handler(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
