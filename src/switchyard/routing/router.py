"""
=============================================================================
ROUTER (DISPATCHER)
=============================================================================

The router is the terminal unit of the middleware chain. It finds the
route entries matching the current path and runs them, in registration
order, until one of them does not Pass.

=============================================================================
DISPATCH ALGORITHM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        DISPATCH FLOW                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   path = "/hello/Bob"                                                │
    │        │                                                             │
    │        ▼                                                             │
    │   safe? ^[\\w\\-~/.]{1,400}$ ──── no ───► return False (not found)    │
    │        │ yes                                                         │
    │        ▼                                                             │
    │   for entry in table.entries():        (registration order)          │
    │        │                                                             │
    │        ├── pattern doesn't match ───► next entry                     │
    │        │                                                             │
    │        ├── match → params on input, open buffer scope, run()         │
    │        │     │                                                       │
    │        │     ├── raises Pass ───► discard scope, next entry          │
    │        │     │                                                       │
    │        │     └── completes ─────► flush scope, return True           │
    │        │                                                             │
    │   exhausted ──────────────────────► return False                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The safety filter runs before any pattern is tried, which bounds the
regex work an untrusted path can cause and rejects "/a/b;c", "/a b",
"/%2e%2e" and friends outright.

=============================================================================
MULTI-CONTROLLER ROUTES
=============================================================================

    app.on("/admin/:page", require_login, render_page)

run() links require_login → render_page and calls only require_login. It
decides whether render_page runs by calling next().

=============================================================================
"""

import logging
import re
from typing import Any, Iterable, Optional, Sequence, TYPE_CHECKING

from ..controller import Controller, factory
from ..errors import HandlerResolutionError, Pass, Stop
from ..middleware.base import Middleware
from .pattern import RouteMatch
from .table import RouteEntry, RouteTable

if TYPE_CHECKING:
    from ..app import App


logger = logging.getLogger(__name__)

# Candidate paths must consist of word characters, "-", "~", "/" and "."
SAFE_PATH = re.compile(r"[\w\-~/.]{1,400}", re.ASCII)


def is_safe_path(path: str) -> bool:
    return SAFE_PATH.fullmatch(path) is not None


class Router(Middleware):
    """
    Route table plus the dispatch algorithm, usable as a chain unit.

    Usage:
        router = Router(app)
        router.on("/hello/:name", hello)
        router.dispatch("/hello/Bob")     # True
    """

    def __init__(self, app: Optional["App"] = None, table: Optional[RouteTable] = None):
        self.app = app
        self.table = table if table is not None else RouteTable()

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def on(self, pattern: str, *handlers: Any) -> RouteEntry:
        """Register one or more handlers for a pattern (last write wins)."""
        entry = self.table.register(pattern, *handlers)
        logger.debug(f"Route '{pattern}' → {len(handlers)} handler(s)")
        return entry

    def set(self, key: str, *handlers: Any) -> RouteEntry:
        """Register handlers for a reserved key (404, error, crash)."""
        return self.table.set(key, *handlers)

    def get(self, key: str) -> Optional[RouteEntry]:
        return self.table.lookup(key)

    # =========================================================================
    # MATCHING AND DISPATCH
    # =========================================================================

    def match(self, path: str) -> Iterable[tuple[RouteEntry, RouteMatch]]:
        """Yield (entry, match) for every entry matching `path`, in order."""
        if not is_safe_path(path):
            logger.debug(f"Rejected unsafe path {path!r}")
            return
        for entry in self.table.entries():
            if not entry.key:
                continue
            found = self.table.compiled(entry.key).match(path)
            if found is not None:
                yield entry, found

    def dispatch(self, path: str) -> bool:
        """
        Run the first matching route that doesn't Pass.

        Returns:
            True if a route ran to completion, False otherwise.

        Raises:
            HandlerResolutionError: A matching route has an unusable handler.
        """
        buffer = self.app.buffer

        for entry, found in self.match(path):
            logger.debug(f"Path {path!r} matched route '{entry.key}'")
            self.app.input.params = dict(found.params)
            self.app.input.args = found.args

            level = buffer.start()
            try:
                self.run(entry.handlers)
            except Pass:
                buffer.discard(level)
                logger.debug(f"Route '{entry.key}' passed")
                continue

            self.app.echo(buffer.end(level))
            return True

        # Nothing ran; drop captures left by routes that passed
        self.app.input.params = {}
        self.app.input.args = ()
        return False

    def run(self, handlers: Sequence[Any], args: Sequence[Any] = ()) -> bool:
        """
        Resolve, link and start a handler chain.

        Only the first unit is called; each unit decides whether to call
        the next one.

        Returns:
            False for an empty handler list, True once the chain ran.

        Raises:
            HandlerResolutionError: If a handler can't be resolved.
        """
        if not handlers:
            return False

        units = []
        for index, reference in enumerate(handlers):
            try:
                unit = factory(reference)
            except HandlerResolutionError as exc:
                raise HandlerResolutionError(
                    f"Can't use the controller in route with index {index}: {exc}"
                ) from exc
            if isinstance(unit, Controller):
                unit.set_args(args)
            units.append(unit)

        successor = None
        for unit in reversed(units):
            unit.set_app(self.app)
            unit.set_next(successor)
            successor = unit

        units[0].call()
        return True

    # =========================================================================
    # CHAIN UNIT
    # =========================================================================

    def call(self) -> None:
        """Dispatch the current input path; present not-found on a miss."""
        buffer = self.app.buffer
        level = buffer.start()
        try:
            if not self.dispatch(self.app.input.path()):
                self.app.not_found()
        except Stop:
            logger.debug("Chain stopped inside the router")
        self.app.echo(buffer.end(level))
