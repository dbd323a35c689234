"""
=============================================================================
APPLICATION (LIFECYCLE CONTROLLER)
=============================================================================

The App ties the pieces together: configuration, lifecycle events, the
middleware chain, the router and the output buffer.

=============================================================================
LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        LIFECYCLE PHASES                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   INIT           App()        adapters, emitter, router, buffer      │
    │     │                         emit "init"                            │
    │     ▼                                                                │
    │   CONFIGURING    setup code   app.on(), app.add(), app.configure()   │
    │     │                                                                │
    │     ▼  app.run()                                                     │
    │   RUNNING        emit "mode", "mode:<name>", "run"                   │
    │     │                                                                │
    │     ▼                                                                │
    │   DISPATCHING    link chain, open buffer, head.call()                │
    │     │            Stop → ignored                                      │
    │     │            Pass → not found (404)                              │
    │     │            Exception → debug: re-raise / else: error (500)     │
    │     ▼                                                                │
    │   FINALIZING     flush buffer into output                            │
    │     │            emit "start", send headers + body, emit "end"       │
    │     ▼                                                                │
    │   SHUTTING_DOWN  app.shutdown() / atexit                             │
    │                  emit "shutdown", crash page after a fatal stop      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Phases only move forward, so an App instance runs once. SHUTTING_DOWN is
reachable from every phase.

=============================================================================
MINIMAL APPLICATION
=============================================================================

    from switchyard import App

    app = App()

    @app.on("/hello/:name")
    def hello(app, next):
        return f"Hello {app.param('name')}"

    app.run()

    $ python hello.py /hello/Bob
    Hello Bob

=============================================================================
"""

import atexit
import contextlib
import logging
import os
import time
import warnings
from enum import IntEnum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .buffer import OutputBuffer
from .cli import CliInput, CliOutput
from .config import Config
from .controller import with_action
from .errors import LifecycleError, Pass, Stop
from .events import Emitter
from .middleware.base import Middleware, MiddlewareChain
from .middleware.pretty_exception import PrettyException
from .routing.router import Router
from .routing.table import RouteEntry
from .transport import Input, Output
from .utils import import_string
from .view import View


logger = logging.getLogger(__name__)


DEFAULT_MODE = "development"
MODE_ENV_VAR = "SWITCHYARD_ENV"

# Reserved route keys and their fallback responses
NOT_FOUND = ("404", 404, "Path not found")
ERROR = ("error", 500, "Error occurred")
CRASH = ("crash", 500, "App is down")


class LifecyclePhase(IntEnum):
    INIT = 0
    CONFIGURING = 1
    RUNNING = 2
    DISPATCHING = 3
    FINALIZING = 4
    SHUTTING_DOWN = 5


def _registers_handler(value: Any) -> bool:
    """Presentation argument is a handler to register, not a failure."""
    if isinstance(value, BaseException):
        return False
    return isinstance(value, (str, Middleware)) or callable(value)


class App:
    """
    Request dispatch application for WSGI and the command line.

    =========================================================================
    FEATURES
    =========================================================================

    - Pattern routes with named parameters and raw regexes
    - Route fallthrough with app.pass_()
    - Middleware chain with app.stop()
    - Lifecycle events (init, mode, run, start, error, end, shutdown)
    - Not-found, error and crash pages
    - Jinja2 views

    =========================================================================
    USAGE
    =========================================================================

        app = App({"debug": True})

        app.add(LoggingMiddleware())

        app.on("/", lambda app, next: "home")
        app.get("/users/:id", "shop.views:Users.show")

        @app.not_found
        def missing(app, next):
            app.render("404.html")

        app.run()

    =========================================================================
    """

    def __init__(
        self,
        config: Union[Config, Mapping[str, Any], None] = None,
        *,
        input: Optional[Input] = None,
        output: Optional[Output] = None,
    ):
        self._phase = LifecyclePhase.INIT
        self.start_time = time.time()

        self.input: Input = input if input is not None else CliInput()
        self.output: Output = output if output is not None else CliOutput()

        self.emitter = Emitter()
        self.router = Router(self)
        self.buffer = OutputBuffer()
        self.middleware = MiddlewareChain()

        self.emitter.on("run", self._default_run_hook)

        self.config = config if isinstance(config, Config) else Config(config)
        self.locals: Dict[str, Any] = {"config": self.config}

        self._mode: Union[str, Callable[[], str], None] = None
        self._engines: Dict[str, Any] = {}
        self._fatal: Optional[BaseException] = None
        self._finalized = False
        self._shut_down = False

        atexit.register(self.shutdown)

        self.emitter.emit("init")
        self._enter(LifecyclePhase.CONFIGURING)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    def _enter(self, phase: LifecyclePhase) -> None:
        if phase < self._phase:
            raise LifecycleError(
                f"Can't move from {self._phase.name} back to {phase.name}"
            )
        self._phase = phase

    def _default_run_hook(self) -> None:
        timezone = self.config.get("timezone")
        if timezone:
            os.environ["TZ"] = timezone
            if hasattr(time, "tzset"):
                time.tzset()

        if self.config.debug:
            self.add(PrettyException())

    def run(self) -> None:
        """
        Run the application once.

        Raises:
            LifecycleError: If this App has already run.
            Exception: Any application failure, in debug mode only.
        """
        if self._phase > LifecyclePhase.CONFIGURING:
            raise LifecycleError("App has already run")

        self.config.validate()
        log_level = self.config.get("log_level")
        if log_level:
            logging.getLogger("switchyard").setLevel(str(log_level).upper())

        mode = self.mode()
        self.emitter.emit("mode", mode)
        self.emitter.emit(f"mode:{mode}")
        self.emitter.emit("run")
        self._enter(LifecyclePhase.RUNNING)
        logger.info(f"Running in {mode} mode: {self.input.method()} {self.input.path()}")

        with contextlib.ExitStack() as stack:
            if self.config.error:
                stack.enter_context(warnings.catch_warnings())
                warnings.simplefilter("error")

            head = self.middleware.link(self, self.router)
            self._enter(LifecyclePhase.DISPATCHING)
            self._dispatch(head)

        self._enter(LifecyclePhase.FINALIZING)
        self._finalized = True

        self.emitter.emit("start")
        if not self.is_cli():
            self.output.send_header()
        self.output.send(self.output.body())
        self.emitter.emit("end")

    def _dispatch(self, head: Middleware) -> None:
        buffered = not self.config.disable_buffer
        base = self.buffer.level
        if buffered:
            self.buffer.start()

        try:
            head.call()
        except Stop:
            logger.debug("Chain stopped")
        except Pass:
            logger.debug("Pass escaped the chain, presenting not found")
            self.buffer.discard(base)
            self.not_found()
        except Exception as exc:
            if self.config.debug:
                raise
            self.buffer.discard(base)
            logger.exception(f"Unhandled error while dispatching {self.input.path()!r}")
            self.error(exc)
            self.emitter.emit("error", exc)
        except BaseException as exc:
            if not isinstance(exc, SystemExit):
                self._fatal = exc
            raise

        if buffered:
            self.output.write(self.buffer.end(base))

    def shutdown(self) -> None:
        """
        Emit "shutdown" and present the crash page after a fatal stop.

        Called by atexit, or explicitly by transports that run several
        apps in one process. Runs once.
        """
        if self._shut_down:
            return
        self._shut_down = True
        atexit.unregister(self.shutdown)

        self._enter(LifecyclePhase.SHUTTING_DOWN)
        self.emitter.emit("shutdown")

        if self._fatal is not None and not self._finalized and not self.config.debug:
            logger.error(f"Run interrupted by {type(self._fatal).__name__}, presenting crash page")
            self.crash(self._fatal)

    # =========================================================================
    # MODE AND CONFIGURATION
    # =========================================================================

    def mode(self, mode: Union[str, Callable[[], str], None] = None) -> Optional[str]:
        """
        Get or set the run mode.

        A callable mode is evaluated once, on first read. Without an
        explicit mode SWITCHYARD_ENV is used, then "development".
        """
        if mode is not None:
            self._mode = mode
            return mode if isinstance(mode, str) else None

        if self._mode is None:
            self._mode = os.environ.get(MODE_ENV_VAR) or DEFAULT_MODE
        elif callable(self._mode):
            self._mode = str(self._mode())
        return self._mode

    def configure(self, mode: Union[str, Callable[..., Any]], fn: Optional[Callable[..., Any]] = None) -> Any:
        """
        Register configuration code for a mode.

            app.configure("production", lambda: app.disable("debug"))

            @app.configure("development")
            def dev():
                app.enable("debug")

        A single callable runs for every mode and receives the mode name.
        """
        if fn is None:
            if callable(mode):
                return self.emitter.on("mode", mode)

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                return self.emitter.on(f"mode:{mode}", func)
            return decorator

        return self.emitter.on(f"mode:{mode}", fn)

    def set(self, key: str, value: Any) -> None:
        self.config.set(key, value)

    def enable(self, key: str) -> None:
        self.config.set(key, True)

    def disable(self, key: str) -> None:
        self.config.set(key, False)

    def enabled(self, key: str) -> bool:
        return self.config.enabled(key)

    def disabled(self, key: str) -> bool:
        return self.config.disabled(key)

    # =========================================================================
    # MIDDLEWARE AND ROUTES
    # =========================================================================

    def add(self, middleware: Any) -> Middleware:
        """
        Append a middleware unit.

        Raises:
            BadMiddlewareError: If `middleware` can't be used as a unit.
        """
        return self.middleware.add(middleware)

    def on(self, pattern: str, *handlers: Any) -> Any:
        """
        Register handlers for a route pattern, any method.

        Without handlers, returns a decorator:

            @app.on("/users/:id")
            def show(app, next):
                ...
        """
        if not handlers:
            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self.router.on(pattern, func)
                return func
            return decorator
        return self.router.on(pattern, *handlers)

    def _on_method(self, method: str, pattern: str, handlers: tuple) -> Any:
        register = not self.is_cli() and self.input.is_method(method)

        if not handlers:
            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                if register:
                    self.router.on(pattern, func)
                return func
            return decorator

        if not register:
            return None
        return self.router.on(pattern, *handlers)

    def get(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("GET", pattern, handlers)

    def post(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("POST", pattern, handlers)

    def put(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("PUT", pattern, handlers)

    def delete(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("DELETE", pattern, handlers)

    def options(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("OPTIONS", pattern, handlers)

    def head(self, pattern: str, *handlers: Any) -> Any:
        return self._on_method("HEAD", pattern, handlers)

    def map(self, pattern: str, *handlers: Any) -> Any:
        """Register for every method, including the command line."""
        return self.on(pattern, *handlers)

    def rest(self, pattern: str, *handlers: Any) -> Optional[RouteEntry]:
        """
        Register class-based controllers dispatched on the HTTP method.

            app.rest("/users/:id", "shop.views:Users")
            # GET → Users.get, POST → Users.post, ...
        """
        if self.is_cli():
            return None
        action = self.input.method().lower()
        return self.router.on(pattern, *(with_action(h, action) for h in handlers))

    def route(self, pattern: Optional[str] = None, *handlers: Any) -> Any:
        """
        Route table access.

            app.route()                    → the Router
            app.route("/users")            → RouteEntry or None
            app.route("/users", handler)   → register
        """
        if pattern is None:
            return self.router
        if not handlers:
            return self.router.get(pattern)
        return self.router.on(pattern, *handlers)

    # =========================================================================
    # SIGNALS AND OUTPUT
    # =========================================================================

    def stop(self) -> None:
        """Abort the rest of the chain, keeping the output written so far."""
        raise Stop()

    def pass_(self) -> None:
        """Give up on the current route and try the next matching one."""
        self.buffer.clean()
        raise Pass()

    def echo(self, data: Union[str, bytes]) -> None:
        """Write to the innermost buffer scope, or to the output body."""
        if self.buffer.level:
            self.buffer.write(data)
        else:
            self.output.write(data)

    def param(self, name: Union[str, Mapping[str, str], None] = None, default: Any = None) -> Any:
        """
        Route parameters of the matched route.

            app.param()              → {"id": "7"}
            app.param("id")          → "7"
            app.param({"id": "8"})   → replace them
        """
        if name is None:
            return self.input.params
        if isinstance(name, Mapping):
            self.input.params = dict(name)
            return self.input.params
        return self.input.params.get(name, default)

    def output_response(self, status: int, body: Union[str, bytes]) -> None:
        """
        Replace status and body.

        Outside of dispatch the response is transmitted right away, since
        the normal finalization won't happen.
        """
        self.output.status(status)
        self.output.body(body)
        if self._phase != LifecyclePhase.DISPATCHING:
            if not self.is_cli():
                self.output.send_header()
            self.output.send(self.output.body())

    # =========================================================================
    # NOT FOUND / ERROR / CRASH
    # =========================================================================

    def not_found(self, handler: Any = None) -> Any:
        """Register the not-found handler, or present the not-found page."""
        return self._presentation(NOT_FOUND, handler)

    def error(self, handler: Any = None) -> Any:
        """Register the error handler, or present the error page for a failure."""
        return self._presentation(ERROR, handler)

    def crash(self, handler: Any = None) -> Any:
        """Register the crash handler, or present the crash page."""
        return self._presentation(CRASH, handler)

    def _presentation(self, kind: tuple, value: Any) -> Any:
        key, status, fallback = kind
        if value is not None and _registers_handler(value):
            self.router.set(key, value)
            return value
        self._present(key, status, fallback, value)
        return None

    def _present(self, key: str, status: int, fallback: str, failure: Optional[BaseException]) -> None:
        self.buffer.clean_all()
        level = self.buffer.start()

        entry = self.router.get(key)
        if entry is not None:
            args = (failure,) if failure is not None else ()
            try:
                self.router.run(entry.handlers, args)
            except Stop:
                pass
            except Pass:
                self.buffer.discard(level + 1)
                self.buffer.clean()
            except Exception:
                logger.exception(f"The '{key}' handler failed, using the default page")
                self.buffer.discard(level + 1)
                self.buffer.clean()

        body = self.buffer.end(level)
        if not body:
            body = fallback
        logger.debug(f"Presenting '{key}' with status {status}")
        self.output_response(status, body)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def engine(self, ext: str, engine: Any = None) -> Any:
        """Get or register the template engine for a file extension."""
        if engine is not None:
            self._engines[ext] = engine
        return self._engines.get(ext)

    def _engine_for(self, path: str) -> Any:
        ext = os.path.splitext(path)[1].lstrip(".")
        engine = self._engines.get(ext) if ext else None
        if isinstance(engine, str):
            engine = import_string(engine)
        if isinstance(engine, type):
            engine = self._engines[ext] = engine()
        return engine

    def render(self, path: str, data: Optional[Mapping[str, Any]] = None) -> None:
        """Render a template from the views directory and echo it."""
        context = dict(self.locals)
        context.update(data or {})
        view = View(
            path,
            context,
            engine=self._engine_for(path),
            directory=self.config.get("views") or "views",
        )
        self.echo(view.render())

    # =========================================================================
    # ENVIRONMENT
    # =========================================================================

    def is_cli(self) -> bool:
        return isinstance(self.input, CliInput)

    def is_win(self) -> bool:
        return os.name == "nt"

    def run_time(self) -> float:
        """Seconds since the App was created."""
        return round(time.time() - self.start_time, 6)

    def root(self) -> str:
        document_root = (self.input.env("DOCUMENT_ROOT") or "").rstrip("/")
        return f"{document_root}{self.input.root_uri().rstrip('/')}/"
