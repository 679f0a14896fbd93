"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler function.

=============================================================================
PATTERN SYNTAX
=============================================================================

    "/"          exact match
    "/:code"     one path segment, captured as path_params["code"]
                 matches "/abc", not "/" and not "/a/b"
    "*"          any path at all (the request target is not inspected)

Paths are matched exactly as the client sent them. There is no
normalization: "/abc/" and "/abc" are different paths, and a path that
does not start with "/" can only be matched by "*".

=============================================================================
ROUTING FLOW
=============================================================================

    request ──► match(method, path)
                   │
                   ├── found ──► handler(request + path_params)
                   │
                   └── none  ──► fallback(request)

The fallback is a handler like any other. The shortener uses it to send
every unknown GET back to the index page.

=============================================================================
"""

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest, Method
from .response import HTTPResponse, see_other


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A registered route: pattern + method + handler."""

    path: str                        # Pattern (e.g. /:code)
    method: Optional[Method]         # None = any method
    handler: Handler
    name: Optional[str] = None

    # Internal: compiled regex for matching
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """A matched route plus the captured path parameters."""
    route: Route
    params: Dict[str, str]


def _default_fallback(request: HTTPRequest) -> HTTPResponse:
    return see_other("/")


class Router:
    """
    Method- and pattern-based request router.

        router = Router()

        @router.get("/")
        def index(request):
            return ok("hello")

        @router.get("/:code")
        def resolve(request):
            code = request.path_params["code"]
            ...

    First registered, first matched.
    """

    def __init__(self, fallback: Optional[Handler] = None):
        """
        Args:
            fallback: Handler for requests no route matches. Defaults to a
                      303 redirect to "/".
        """
        self._routes: List[Route] = []
        self._fallback: Handler = fallback or _default_fallback

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Example:
            router.add_route("/:code", resolve, method="GET")
        """
        route = Route(
            path=path,
            method=Method(method.upper()) if method else None,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method.value if route.method else '*'} {path}")
        return route

    @staticmethod
    def _compile_pattern(path: str) -> re.Pattern:
        """
        Compile a route pattern into an anchored regex.

            "/"          → ^/$
            "/:code"     → ^/(?P<code>[^/]+)$
            "*"          → ^.*$
        """
        if path == "*":
            return re.compile(r"^.*$", re.DOTALL)

        regex_parts = ["^"]
        for segment in path.split("/")[1:]:
            regex_parts.append("/")
            if segment.startswith(":"):
                regex_parts.append(f"(?P<{segment[1:]}>[^/]+)")
            else:
                regex_parts.append(re.escape(segment))
        regex_parts.append("$")

        # "/" splits to ["", ""], which yields "^/$"
        return re.compile("".join(regex_parts))

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: Method, path: str) -> Optional[RouteMatch]:
        """Find the first route accepting this method and path."""
        for route in self._routes:
            if route.method is not None and route.method != method:
                continue

            found = route._pattern.match(path) if route._pattern else None
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        Path parameters are attached to a copy of the request; the
        original stays untouched.
        """
        match = self.match(request.method, request.path)
        if match is None:
            return self._fallback(request)

        routed = dataclasses.replace(request, path_params=match.params)
        return match.route.handler(routed)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: Optional[str] = None, name: Optional[str] = None):
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method=method, name=name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None):
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None):
        return self.route(path, "POST", name)

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order."""
        return list(self._routes)
