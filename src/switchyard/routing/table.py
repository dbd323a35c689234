"""
=============================================================================
ROUTE TABLE
=============================================================================

Ordered mapping from pattern text to the handlers registered for it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTE TABLE                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   key                 handlers                  try order           │
    │   ────────────────    ──────────────────────    ─────────           │
    │   /                   (index,)                  1                   │
    │   /users/:id          (auth, show_user)         2                   │
    │   ^/archive/(\\d+)     (archive,)                3                   │
    │   404                 (not_found_page,)         never matched       │
    │   error               (error_page,)             never matched       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Insertion order IS match priority. Registering a key again replaces its
handlers (last write wins) without moving the key. Reserved keys share the
storage but are only reachable through lookup().

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .pattern import RoutePattern, compile_pattern


logger = logging.getLogger(__name__)

# Keys used by the not-found / error / crash presentations
RESERVED_KEYS = frozenset({"404", "error", "crash"})


@dataclass(frozen=True)
class RouteEntry:
    """
    One registration: a pattern key and its handler chain.

    More than one handler makes a multi-controller route; the first
    handler decides whether the next one runs.
    """
    key: str
    handlers: Tuple[Any, ...]

    @property
    def is_chain(self) -> bool:
        return len(self.handlers) > 1


class RouteTable:
    """
    Registration-ordered route storage with a lazy pattern cache.

    Usage:
        table = RouteTable()
        table.register("/users/:id", show_user)
        table.register("/users/:id", auth, show_user)   # replaces the entry
        for entry in table.entries():
            pattern = table.compiled(entry.key)
    """

    def __init__(self):
        self._entries: Dict[str, RouteEntry] = {}
        self._compiled: Dict[str, RoutePattern] = {}

    def register(self, key: str, *handlers: Any) -> RouteEntry:
        """
        Register handlers for a pattern key.

        Raises:
            ValueError: If no handler is given.
        """
        if not handlers:
            raise ValueError(f"Route '{key}' needs at least one handler")

        key = str(key)
        if key in self._entries:
            logger.debug(f"Replacing route '{key}'")
        entry = RouteEntry(key=key, handlers=tuple(handlers))
        self._entries[key] = entry
        # Invalidate the compiled pattern for this key only
        self._compiled.pop(key, None)
        return entry

    # Reserved keys read better as "set"
    set = register

    def lookup(self, key: str) -> Optional[RouteEntry]:
        """Direct key lookup, including reserved keys."""
        return self._entries.get(str(key))

    def remove(self, key: str) -> bool:
        self._compiled.pop(key, None)
        return self._entries.pop(key, None) is not None

    def entries(self) -> Iterator[RouteEntry]:
        """Entries that take part in path matching, in registration order."""
        for key, entry in list(self._entries.items()):
            if key not in RESERVED_KEYS:
                yield entry

    def compiled(self, key: str) -> RoutePattern:
        """Compiled pattern for `key`, compiled on first use."""
        pattern = self._compiled.get(key)
        if pattern is None:
            pattern = self._compiled[key] = compile_pattern(key)
        return pattern

    def keys(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return str(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RouteEntry]:
        return self.entries()
