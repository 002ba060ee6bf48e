"""
=============================================================================
HTTP ROUTER
=============================================================================

Maps (method, path) pairs to handler functions.

=============================================================================
HOW ROUTING WORKS
=============================================================================

The router holds an ORDERED list of routes. A request is checked against
each route in turn; the first one whose method and pattern both match
handles it. If none match, the fallback handler answers (404).

    GET /echo/hello
        │
        ▼
    ┌──────────────────────────────────────────────────────────┐
    │ 1. GET  /                  ✗ pattern                      │
    │ 2. GET  /echo/*message     ✓ → message = "hello"          │──► echo()
    │ 3. GET  /user-agent                                       │
    │ 4. GET  /files/*filename                                  │
    │ 5. POST /files/*filename                                  │
    └──────────────────────────────────────────────────────────┘
        no match at all ──► fallback (404)

=============================================================================
PATTERN SYNTAX
=============================================================================

    ┌──────────────────┬────────────────────────────┬──────────────────────┐
    │ Pattern          │ Regex                      │ Example match        │
    ├──────────────────┼────────────────────────────┼──────────────────────┤
    │ /                │ ^/\\Z                      │ /                    │
    │ /user-agent      │ ^/user\\-agent\\Z           │ /user-agent          │
    │ /files/:name     │ ^/files/(?P<name>[^/]+)\\Z │ /files/a.txt         │
    │ /echo/*message   │ ^/echo/(?P<message>.*)\\Z  │ /echo/, /echo/a/b    │
    └──────────────────┴────────────────────────────┴──────────────────────┘

    :param     one non-empty path segment (no slashes)
    *param     everything after the literal prefix, possibly empty

Paths are matched exactly as the client sent them. No trailing-slash
stripping, no URL decoding: "/echo" does not match "/echo/*message", and
"/echo/" matches with message = "".

Methods are compared case-sensitively. A path that exists under another
method still falls through to the fallback (no 405).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A (method, pattern) pair bound to a handler.

        Route("GET", "/echo/*message", handle_echo)
    """

    method: str                      # Exact HTTP method ("GET", "POST")
    path: str                        # URL pattern ("/echo/*message")
    handler: Handler
    name: Optional[str] = None       # Label used in debug logging

    # Internal: compiled regex, filled in by __post_init__
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self._pattern is None:
            self._pattern, self._param_names = compile_pattern(self.path)

    def matches(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Captured params if this route accepts the request, else None."""
        if method != self.method:
            return None
        match = self._pattern.match(path)
        if match is None:
            return None
        return match.groupdict()


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

        Pattern: /files/*filename
        Path:    /files/notes.txt
        Result:  RouteMatch(route=<Route>, params={"filename": "notes.txt"})
    """
    route: Route
    params: Dict[str, str]


def compile_pattern(path: str) -> tuple[re.Pattern, List[str]]:
    """
    Compile a path pattern into an anchored regex.

    =====================================================================
    PATTERN COMPILATION
    =====================================================================

    Input:  "/files/*filename"

    Step 1: Split by "/"
            ["", "files", "*filename"]

    Step 2: Process each segment
            ""           → (skip empty)
            "files"      → /files                   (static)
            "*filename"  → /(?P<filename>.*)        (wildcard, stops here)

    Step 3: Join and anchor
            ^/files/(?P<filename>.*)\\Z

    =====================================================================

    Args:
        path: Route pattern to compile

    Returns:
        Tuple of (compiled regex, list of parameter names)
    """
    param_names: List[str] = []
    regex_parts = ["^"]

    for segment in path.split("/"):
        if not segment:
            continue

        regex_parts.append("/")

        if segment.startswith(":"):
            param_name = segment[1:]
            param_names.append(param_name)
            regex_parts.append(f"(?P<{param_name}>[^/]+)")

        elif segment.startswith("*"):
            param_name = segment[1:] or "wildcard"
            param_names.append(param_name)
            regex_parts.append(f"(?P<{param_name}>.*)")
            break  # Wildcard consumes everything

        else:
            regex_parts.append(re.escape(segment))

    if len(regex_parts) == 1:
        # Pattern "/" has no segments and matches only the bare root
        regex_parts.append("/")

    # \Z, not $: "$" would also match before a trailing newline
    regex_parts.append(r"\Z")
    return re.compile("".join(regex_parts), re.DOTALL), param_names


class Router:
    """
    Ordered, first-match-wins request router.

    ==========================================================================
    USAGE
    ==========================================================================

    Declarative table:

        router = Router([
            Route("GET", "/", handle_root),
            Route("GET", "/echo/*message", handle_echo),
        ])

    Or decorators:

        router = Router()

        @router.get("/user-agent")
        def user_agent(request):
            return ok_text(request.user_agent)

    Every request gets a response: unmatched ones go to `fallback`.

    ==========================================================================
    """

    def __init__(
        self,
        routes: Optional[Iterable[Route]] = None,
        fallback: Optional[Handler] = None,
    ):
        self._routes: List[Route] = list(routes or [])
        self.fallback: Handler = fallback or (lambda request: not_found())

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        name: Optional[str] = None,
    ) -> Route:
        """Append a route; it is tried after every route added before it."""
        route = Route(method=method, path=path, handler=handler, name=name)
        self._routes.append(route)
        return route

    def route(self, method: str, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, path, handler, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("GET", path, name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route("POST", path, name)

    # =========================================================================
    # MATCHING / DISPATCH
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route accepting (method, path).

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            params = route.matches(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        Path parameters are injected into `request.path_params` before the
        handler runs. Handler exceptions propagate to the caller.
        """
        match = self.match(request.method, request.path)
        if match is None:
            logger.debug("No route for %s %s", request.method, request.path)
            return self.fallback(request)

        request.path_params = match.params
        return match.route.handler(request)

    def __call__(self, request: HTTPRequest) -> HTTPResponse:
        return self.handle(request)
