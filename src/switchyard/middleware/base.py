"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the middleware unit protocol and the chain that links units
together. Implements the Chain of Responsibility design pattern.

=============================================================================
CHAIN OF RESPONSIBILITY PATTERN
=============================================================================

Every unit exposes one operation, call(). A unit may:

1. Do work
2. Invoke its successor with self.next() (zero or one times)
3. Do more work after next() returns
4. Raise Stop to abort the rest of the chain (output so far is kept)

    ┌─────────────────────────────────────────────────────────────────────┐
    │              CHAIN OF RESPONSIBILITY - CALL FLOW                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   App.run() ──► head.call()                                          │
    │                                                                      │
    │   ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────┐     │
    │   │ Logging  │───►│   Auth   │───►│ Pretty   │───►│  Router  │     │
    │   │          │    │          │    │Exception │    │(terminal)│     │
    │   └────┬─────┘    └────┬─────┘    └────┬─────┘    └────┬─────┘     │
    │        │               │               │               │            │
    │   [before]        [before]        [try:]          [dispatch]       │
    │   start timer     check token     next()          run route        │
    │        ▲               ▲               ▲               │            │
    │   [after]         [after]         [except:]            ▼            │
    │   log access      -               render trace      [done]         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Unlike a request → response pipeline, units communicate through the
shared application (input, output, buffer) rather than return values.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, List, Optional, TYPE_CHECKING
import logging

from ..errors import BadMiddlewareError
from ..utils import import_string

if TYPE_CHECKING:
    from ..app import App


logger = logging.getLogger(__name__)


# A function middleware: receives the app and a zero-argument `next`.
MiddlewareFunc = Callable[["App", Callable[[], None]], Any]


class Middleware(ABC):
    """
    Abstract base class for chain units.

    =========================================================================
    MIDDLEWARE ANATOMY
    =========================================================================

        class Timing(Middleware):
            def call(self):
                started = time.perf_counter()     # before
                self.next()                       # continue the chain
                elapsed = time.perf_counter() - started
                self.app.output.header("X-Elapsed", f"{elapsed:.4f}")

    =========================================================================
    """

    # Class-level defaults so subclasses may skip super().__init__()
    app: Optional["App"] = None
    _next: Optional["Middleware"] = None

    @abstractmethod
    def call(self) -> None:
        """Run this unit. Call self.next() to continue the chain."""

    def next(self) -> None:
        """Invoke the successor. A no-op at the end of the chain."""
        if self._next is not None:
            self._next.call()

    def set_next(self, unit: Optional["Middleware"]) -> "Middleware":
        self._next = unit
        return self

    def get_next(self) -> Optional["Middleware"]:
        return self._next

    def set_app(self, app: "App") -> "Middleware":
        self.app = app
        return self

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


# =============================================================================
# FUNCTION MIDDLEWARE
# =============================================================================
#
# Quick one-off middleware without a class:
#
#     def add_header(app, next):
#         next()
#         app.output.header("X-Custom", "value")
#
#     app.add(add_header)
#
# =============================================================================

class FunctionMiddleware(Middleware):
    """
    Wraps a plain function as a chain unit.

    The function is called as func(app, next). A str/bytes return value is
    echoed into the current output buffer.
    """

    def __init__(self, func: MiddlewareFunc, name: Optional[str] = None):
        self._func = func
        self._name = name or getattr(func, "__name__", type(func).__name__)

    def call(self) -> None:
        result = self._func(self.app, self.next)
        if isinstance(result, (str, bytes)) and self.app is not None:
            self.app.echo(result)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(func: MiddlewareFunc) -> FunctionMiddleware:
    """
    Decorator to create middleware from a function.

    Usage:
        @function_middleware
        def powered_by(app, next):
            app.output.header("X-Powered-By", "switchyard")
            next()

        app.add(powered_by)
    """
    return FunctionMiddleware(func)


def to_middleware(value: Any) -> Middleware:
    """
    Coerce a registration value into a chain unit.

    Accepted:
        - a Middleware instance
        - a Middleware subclass (instantiated without arguments)
        - "package.module:ClassName" naming a Middleware subclass
        - any other callable, wrapped in FunctionMiddleware

    Raises:
        BadMiddlewareError: For anything else.
    """
    if isinstance(value, str):
        try:
            value = import_string(value)
        except (ImportError, ValueError) as exc:
            raise BadMiddlewareError(f"Bad middleware can not be added: {exc}") from exc
        if not (isinstance(value, type) and issubclass(value, Middleware)):
            raise BadMiddlewareError(f"Bad middleware can not be added: {value!r} is not a Middleware class")

    if isinstance(value, Middleware):
        return value
    if isinstance(value, type):
        if issubclass(value, Middleware):
            return value()
        raise BadMiddlewareError(f"Bad middleware can not be added: {value.__name__} is not a Middleware class")
    if callable(value):
        return FunctionMiddleware(value)

    raise BadMiddlewareError(f"Bad middleware can not be added: {value!r}")


class MiddlewareChain:
    """
    Ordered list of units, linked once per run.

    =========================================================================
    LINKING
    =========================================================================

    Given [MW1, MW2, Router] the chain is built bottom-up:

        Step 1: Router.next = None          (terminal)
        Step 2: MW2.next    = Router
        Step 3: MW1.next    = MW2

        head = MW1 → MW2 → Router

    Every unit also receives the owning app, which is how units reach the
    input, output and buffer.

    =========================================================================
    """

    def __init__(self):
        self._units: List[Middleware] = []

    def add(self, middleware: Any) -> Middleware:
        """
        Append a unit (coerced with to_middleware).

        Returns:
            The registered unit.
        """
        unit = to_middleware(middleware)
        self._units.append(unit)
        logger.debug(f"Added middleware: {unit.name}")
        return unit

    def use(self, *middleware: Any) -> "MiddlewareChain":
        for mw in middleware:
            self.add(mw)
        return self

    def link(self, app: "App", terminal: Optional[Middleware] = None) -> Optional[Middleware]:
        """
        Link the units and return the head.

        Args:
            app: Shared application context handed to every unit.
            terminal: Unit appended at the end unless already present.

        Returns:
            The first unit, or None for an empty chain without terminal.
        """
        units = list(self._units)
        if terminal is not None and terminal not in units:
            units.append(terminal)

        successor: Optional[Middleware] = None
        for unit in reversed(units):
            unit.set_app(app)
            unit.set_next(successor)
            successor = unit

        if units:
            logger.debug("Middleware chain: " + " → ".join(unit.name for unit in units))
        return successor

    def __contains__(self, unit: Middleware) -> bool:
        return unit in self._units

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._units)
