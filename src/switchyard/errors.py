"""
=============================================================================
ERRORS AND CONTROL SIGNALS
=============================================================================

Two families of exceptions live here and they must never be confused:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      EXCEPTION TAXONOMY                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ControlSignal                  (not an error - flow control)       │
    │   ├── Stop    terminate the chain now, keep the output so far       │
    │   └── Pass    this route declines, try the next matching one        │
    │                                                                      │
    │   SwitchyardError                (genuine failures)                  │
    │   ├── HandlerResolutionError   handler reference can't be resolved  │
    │   ├── BadMiddlewareError       add() got something unusable         │
    │   └── LifecycleError           phase transition went backwards      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Signals are handled at the exact layer that understands them (the chain
invocation in App.run and Router.call, the dispatch loop for Pass) and
never reach the caller of App.run().

=============================================================================
"""


class ControlSignal(Exception):
    """Base class for the two non-local exits used by handlers."""


class Stop(ControlSignal):
    """
    Terminate the remaining middleware chain.

    Output already written to the buffer is preserved and flushed.
    """


class Pass(ControlSignal):
    """
    Abandon the current route attempt.

    The dispatcher discards whatever the attempt buffered and tries the
    next route whose pattern matches the same path.
    """


class SwitchyardError(Exception):
    """Base class for framework failures."""


class HandlerResolutionError(SwitchyardError):
    """A route handler reference could not be turned into a chain unit."""


class BadMiddlewareError(SwitchyardError, TypeError):
    """Raised by App.add() for values that cannot become middleware."""


class LifecycleError(SwitchyardError):
    """Raised when the application is asked to move to an earlier phase."""
