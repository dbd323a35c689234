"""
=============================================================================
MIDDLEWARE
=============================================================================

Middleware units run between App.run() and the router, each deciding
whether (and when) the rest of the chain runs:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      MIDDLEWARE CHAIN                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   App.run()                                                          │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────┐                                              │
    │   │ LoggingMiddleware│ ──► access log line, X-Request-ID            │
    │   └────────┬─────────┘                                              │
    │            ▼                                                         │
    │   ┌──────────────────┐                                              │
    │   │ your middleware  │ ──► may app.stop() the chain                 │
    │   └────────┬─────────┘                                              │
    │            ▼                                                         │
    │   ┌──────────────────┐                                              │
    │   │ PrettyException  │ ──► debug mode only, traceback page          │
    │   └────────┬─────────┘                                              │
    │            ▼                                                         │
    │   ┌──────────────────┐                                              │
    │   │      Router      │ ──► matched route handlers                   │
    │   └──────────────────┘                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
AVAILABLE MIDDLEWARE
=============================================================================

LoggingMiddleware:
    One access log line per run, text or JSON.

PrettyException:
    Traceback page for failures, enabled by the `debug` setting.

=============================================================================
"""

from .base import (
    FunctionMiddleware,
    Middleware,
    MiddlewareChain,
    function_middleware,
    to_middleware,
)
from .logging import LoggingMiddleware, RequestLog
from .pretty_exception import PrettyException

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewareChain",
    "FunctionMiddleware",
    "function_middleware",
    "to_middleware",

    # Built-in middleware
    "LoggingMiddleware",
    "RequestLog",
    "PrettyException",
]
