"""
=============================================================================
SWITCHYARD - Request Dispatch for WSGI and the Command Line
=============================================================================

A small framework built around one idea: a request is a path pushed
through a chain of middleware into an ordered route table.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    SWITCHYARD ARCHITECTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. ROUTE PATTERNS                                                  │
    │      - exact text, "/users/:id" parameters, "^raw regex"             │
    │      - unsafe paths rejected before any pattern is tried             │
    │                                                                      │
    │   2. ROUTE TABLE + DISPATCHER                                        │
    │      - registration order is match priority                          │
    │      - app.pass_() falls through to the next matching route          │
    │      - multi-controller routes chained with next()                   │
    │                                                                      │
    │   3. MIDDLEWARE CHAIN                                                │
    │      - Chain of Responsibility, router as the terminal unit          │
    │      - app.stop() ends the chain, keeping the output                 │
    │                                                                      │
    │   4. LIFECYCLE                                                       │
    │      - init / mode / run / start / error / end / shutdown events     │
    │      - not-found, error and crash pages                              │
    │                                                                      │
    │   5. TRANSPORTS                                                      │
    │      - WSGI (one App per request)                                    │
    │      - command line (argv path, stdout body, exit code)              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    switchyard/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m switchyard)
    ├── app.py               # App: lifecycle controller
    ├── buffer.py            # Nestable output capture
    ├── config.py            # Dotted-path configuration
    ├── controller.py        # Controllers and handler resolution
    ├── errors.py            # Stop, Pass and framework errors
    ├── events.py            # Lifecycle event emitter
    ├── transport.py         # Input / Output base adapters
    ├── view.py              # Jinja2 views
    ├── routing/             # Patterns, route table, dispatcher
    ├── middleware/          # Chain protocol and built-in middleware
    ├── http/                # WSGI input/output and application
    └── cli/                 # argv input, stream output

=============================================================================
QUICK START
=============================================================================

    from switchyard import App

    def setup(app):
        @app.on("/hello/:name")
        def hello(app, next):
            return f"Hello {app.param('name')}"

    # Command line:  python -m switchyard call hello:setup /hello/Bob
    # HTTP:          python -m switchyard serve hello:setup --port 8000

=============================================================================
"""

__version__ = "1.0.0"
__author__ = "Switchyard Contributors"

from .app import App, LifecyclePhase
from .config import Config
from .controller import Controller, factory
from .errors import (
    BadMiddlewareError,
    ControlSignal,
    HandlerResolutionError,
    LifecycleError,
    Pass,
    Stop,
    SwitchyardError,
)
from .events import Emitter
from .middleware import (
    LoggingMiddleware,
    Middleware,
    PrettyException,
    function_middleware,
)
from .view import View

__all__ = [
    # Application
    "App",
    "LifecyclePhase",
    "Config",
    "Emitter",

    # Handlers and middleware
    "Controller",
    "factory",
    "Middleware",
    "function_middleware",
    "LoggingMiddleware",
    "PrettyException",
    "View",

    # Signals and errors
    "ControlSignal",
    "Stop",
    "Pass",
    "SwitchyardError",
    "HandlerResolutionError",
    "BadMiddlewareError",
    "LifecycleError",
]
