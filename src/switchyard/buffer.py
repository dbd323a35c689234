"""
=============================================================================
OUTPUT BUFFER
=============================================================================

An explicit, nestable capture scope for handler output.

Handlers never write to the transport directly. Everything they echo goes
into the innermost open scope; the component that opened a scope decides
what happens to its contents:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SCOPE NESTING                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   level 1   App.run()           ──► appended to the output body     │
    │   level 2     Router.call()     ──► flushed into level 1            │
    │   level 3       route attempt   ──► flushed into level 2            │
    │                                     ... or discarded on Pass        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Scopes are identified by the level that was current before they were
opened, so a component can unwind everything it opened (and anything a
failing handler left behind) with a single end()/discard() call.

=============================================================================
"""

import io
from typing import List, Union


class OutputBuffer:
    """Stack of in-memory text scopes."""

    def __init__(self):
        self._scopes: List[io.StringIO] = []

    @property
    def level(self) -> int:
        """Number of open scopes (0 = not buffering)."""
        return len(self._scopes)

    def start(self) -> int:
        """
        Open a new scope.

        Returns:
            The level before the scope was opened. Pass it to end() or
            discard() to close this scope and everything nested in it.
        """
        level = len(self._scopes)
        self._scopes.append(io.StringIO())
        return level

    def write(self, data: Union[str, bytes]) -> None:
        """Write to the innermost scope."""
        if not self._scopes:
            raise RuntimeError("No output buffer scope is open")
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        self._scopes[-1].write(data)

    def contents(self) -> str:
        """Text of the innermost scope, without closing it."""
        return self._scopes[-1].getvalue() if self._scopes else ""

    def clean(self) -> None:
        """Drop the contents of the innermost scope but keep it open."""
        if self._scopes:
            self._scopes[-1] = io.StringIO()

    def clean_all(self) -> None:
        """Drop the contents of every open scope."""
        self._scopes = [io.StringIO() for _ in self._scopes]

    def get_clean(self) -> str:
        """Close the innermost scope and return what it captured."""
        if not self._scopes:
            return ""
        return self._scopes.pop().getvalue()

    def end(self, level: int) -> str:
        """
        Close every scope above `level`.

        Returns:
            The captured text, outermost scope first.
        """
        parts = []
        while len(self._scopes) > level:
            parts.append(self._scopes.pop().getvalue())
        return "".join(reversed(parts))

    def discard(self, level: int) -> None:
        """Close every scope above `level`, throwing the text away."""
        del self._scopes[level:]
