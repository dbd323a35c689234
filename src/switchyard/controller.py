"""
=============================================================================
CONTROLLERS AND THE CONTROLLER FACTORY
=============================================================================

A controller is a route-level chain unit. Route handlers are registered as
*references* and only turned into units when their route is tried:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HANDLER REFERENCES                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   reference                          resolved unit                  │
    │   ───────────────────────────────    ─────────────────────────────  │
    │   def show(app, next): ...           Controller(show)               │
    │   UsersController                    UsersController()              │
    │   UsersController()                  the instance itself            │
    │   "shop.views:UsersController"       UsersController()              │
    │   "shop.views:UsersController.get"   UsersController(action="get")  │
    │   "shop.views:show"                  Controller(show)               │
    │   Controller subclass w/o handle()   HandlerResolutionError         │
    │   42                                 HandlerResolutionError         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Function handlers are called as fn(app, next, *args); methods of class
based controllers as method(*args) with self.app / self.next() available.
Extra args are only supplied by the error and crash presentations (the
failure being presented). A str/bytes return value is echoed.

=============================================================================
"""

from typing import Any, Callable, Optional, Tuple, Union

from .errors import HandlerResolutionError
from .middleware.base import Middleware
from .utils import import_string, split_reference


HandlerRef = Union[str, Callable[..., Any], Middleware, type]


class Controller(Middleware):
    """
    Route handler unit.

    Subclass it for class-based controllers:

        class Users(Controller):
            def get(self):
                return f"user {self.app.param('id')}"

            def post(self):
                ...

        app.rest("/users/:id", Users)          # dispatches on HTTP method
        app.get("/users/:id", "shop.views:Users.get")
    """

    def __init__(self, action: Union[Callable[..., Any], str, None] = None):
        self.action = action
        self.args: Tuple[Any, ...] = ()

    def set_args(self, args: Tuple[Any, ...]) -> "Controller":
        self.args = tuple(args)
        return self

    def call(self) -> None:
        result = self.invoke()
        if isinstance(result, (str, bytes)):
            self.app.echo(result)

    def invoke(self) -> Any:
        if callable(self.action):
            return self.action(self.app, self.next, *self.args)
        if isinstance(self.action, str):
            return getattr(self, self.action)(*self.args)
        return self.handle(*self.args)

    def handle(self, *args: Any) -> Any:
        """Default action for class-based controllers without a method."""
        raise NotImplementedError(f"{self.name} has no default action")

    @property
    def name(self) -> str:
        if callable(self.action):
            return getattr(self.action, "__name__", self.__class__.__name__)
        if isinstance(self.action, str):
            return f"{self.__class__.__name__}.{self.action}"
        return self.__class__.__name__


def _from_class(cls: type, action: Optional[str]) -> Middleware:
    if not issubclass(cls, Middleware):
        raise HandlerResolutionError(f"{cls.__name__} is not a chain unit")
    if action is None:
        if issubclass(cls, Controller) and cls.handle is Controller.handle:
            raise HandlerResolutionError(f"{cls.__name__} has no default action, name a method")
        return cls()
    if not issubclass(cls, Controller):
        raise HandlerResolutionError(f"{cls.__name__} is not a Controller, can't call '{action}'")
    if not callable(getattr(cls, action, None)):
        raise HandlerResolutionError(f"{cls.__name__} has no action '{action}'")
    return cls(action=action)


def _from_string(reference: str) -> Middleware:
    try:
        module_name, attr_path = split_reference(reference)
    except ValueError as exc:
        raise HandlerResolutionError(str(exc)) from exc

    # "module:Class.method" - try the full path first, then the class + action
    owner_path, _, action = attr_path.rpartition(".")
    try:
        target = import_string(reference)
    except ImportError as exc:
        if not owner_path:
            raise HandlerResolutionError(f"Can't import '{reference}': {exc}") from exc
        try:
            owner = import_string(f"{module_name}:{owner_path}")
        except ImportError as owner_exc:
            raise HandlerResolutionError(f"Can't import '{reference}': {owner_exc}") from owner_exc
        if not isinstance(owner, type):
            raise HandlerResolutionError(f"Can't import '{reference}': {exc}") from exc
        return _from_class(owner, action)

    if isinstance(target, type):
        return _from_class(target, None)

    if owner_path and callable(target):
        owner = import_string(f"{module_name}:{owner_path}")
        if isinstance(owner, type):
            return _from_class(owner, action)

    return factory(target)


def factory(reference: HandlerRef) -> Middleware:
    """
    Resolve a handler reference into a chain unit.

    Raises:
        HandlerResolutionError: If the reference can't be used.
    """
    if isinstance(reference, Middleware):
        return reference
    if isinstance(reference, type):
        return _from_class(reference, None)
    if isinstance(reference, str):
        return _from_string(reference)
    if callable(reference):
        return Controller(reference)
    raise HandlerResolutionError(f"Unsupported handler reference: {reference!r}")


def with_action(reference: HandlerRef, action: str) -> HandlerRef:
    """
    Point a class reference at one of its methods.

    Used by App.rest(): "shop.views:Users" becomes "shop.views:Users.get";
    a Controller subclass becomes an instance bound to `action`. References
    that already name a method, and plain functions, are returned as is.
    """
    if isinstance(reference, str):
        try:
            module_name, attr_path = split_reference(reference)
        except ValueError:
            return reference
        try:
            target = import_string(reference)
        except ImportError:
            return reference
        if isinstance(target, type):
            return f"{module_name}:{attr_path}.{action}"
        return reference
    if isinstance(reference, type) and issubclass(reference, Controller):
        return reference(action=action)
    return reference
