"""
Lifecycle event emitter.

A tiny publish/subscribe registry keyed by event name. The application
emits ``init``, ``mode``, ``mode:<name>``, ``run``, ``start``, ``error``,
``end`` and ``shutdown``; anything else is free for user code.
"""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Emitter:
    """
    Event registry.

    Listeners run synchronously, in subscription order, with whatever
    positional arguments the emitter passes:

        emitter = Emitter()
        emitter.on("mode", lambda mode: print(f"running in {mode}"))
        emitter.emit("mode", "production")
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        """Subscribe `listener` to `event`. Returns the listener."""
        self._listeners.setdefault(event, []).append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Subscribe a listener that is removed after its first call."""
        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        wrapper.listener = listener
        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener = None) -> None:
        """Remove one listener, or every listener of `event`."""
        if listener is None:
            self._listeners.pop(event, None)
            return
        listeners = self._listeners.get(event, [])
        for registered in list(listeners):
            if registered is listener or getattr(registered, "listener", None) is listener:
                listeners.remove(registered)

    def emit(self, event: str, *args: Any) -> int:
        """
        Call every listener of `event`.

        Returns:
            How many listeners were called.
        """
        listeners = list(self._listeners.get(event, ()))
        if listeners:
            logger.debug(f"Emitting '{event}' to {len(listeners)} listener(s)")
        for listener in listeners:
            listener(*args)
        return len(listeners)

    def listeners(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, ()))

    def has(self, event: str) -> bool:
        return bool(self._listeners.get(event))
