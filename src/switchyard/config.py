"""
=============================================================================
APPLICATION CONFIGURATION
=============================================================================

Key/value configuration store with dotted-path nesting.

=============================================================================
WHY NOT A FLAT DATACLASS?
=============================================================================

The framework only knows a handful of settings (debug, timezone, views...)
but applications hang their own nested settings off the same store:

    config.set("db.primary.host", "10.0.0.5")
    config.get("db.primary")        # {"host": "10.0.0.5"}
    config.db                       # {"primary": {"host": "10.0.0.5"}}
    config.missing                  # None, never AttributeError

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Runtime calls                                                  │
    │      └── app.set("debug", True) / app.enable("error")               │
    │                                                                      │
    │   2. Values passed to App(config={...})                             │
    │                                                                      │
    │   3. Environment variables, via Config.from_env()                   │
    │      └── SWITCHYARD_DEBUG=1 python -m switchyard serve app:setup   │
    │                                                                      │
    │   4. DEFAULTS (below)                                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import copy
import os
from typing import Any, Dict, Mapping, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")

DEFAULTS: Dict[str, Any] = {
    # Show raw failures (and the PrettyException page) instead of the
    # fixed error presentation.
    "debug": False,
    # Turn Python warnings into exceptions while the app runs.
    "error": False,
    # Let handler output bypass the App-level buffer scope.
    "disable_buffer": False,
    # TZ name applied by the default 'run' hook, e.g. "Europe/Paris".
    "timezone": None,
    # Directory searched by App.render().
    "views": "views",
    # Level for the "switchyard" logger; None leaves logging untouched.
    "log_level": None,
    # Access log format used by LoggingMiddleware.
    "log_format": "text",
}

_TRUE = ("1", "true", "yes", "on")


def _to_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE


# environment variable suffix -> (config key, parser)
_ENV_KEYS = {
    "DEBUG": ("debug", _to_bool),
    "ERROR": ("error", _to_bool),
    "DISABLE_BUFFER": ("disable_buffer", _to_bool),
    "TIMEZONE": ("timezone", str),
    "VIEWS": ("views", str),
    "LOG_LEVEL": ("log_level", str.upper),
    "LOG_FORMAT": ("log_format", str.lower),
}


class Config:
    """
    Dotted-path configuration store.

    Usage:
        config = Config({"debug": True, "db.host": "localhost"})
        config.get("db.host")          # "localhost"
        config.debug                   # True
        config["db"]                   # {"host": "localhost"}
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(DEFAULTS)
        if values:
            self.update(values)

    # =========================================================================
    # ACCESS
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value; `key` may be a dotted path into nested dicts."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """
        Write a value, creating intermediate dicts for dotted paths.

        A non-dict value sitting on the path is replaced by a dict.
        """
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[parts[-1]] = value

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def has(self, key: str) -> bool:
        marker = object()
        return self.get(key, marker) is not marker

    def enabled(self, key: str) -> bool:
        """True only when the value is exactly True."""
        return self.get(key) is True

    def disabled(self, key: str) -> bool:
        """True only when the value is exactly False."""
        return self.get(key) is False

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def __getattr__(self, name: str) -> Any:
        # Missing settings read as None, like an unset option.
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"Config({self._data!r})"

    # =========================================================================
    # SOURCES AND VALIDATION
    # =========================================================================

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = "SWITCHYARD_",
    ) -> "Config":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        SWITCHYARD_DEBUG           debug mode (1/true/yes/on)
        SWITCHYARD_ERROR           warnings become exceptions
        SWITCHYARD_DISABLE_BUFFER  bypass the App-level buffer
        SWITCHYARD_TIMEZONE        TZ name, e.g. UTC
        SWITCHYARD_VIEWS           template directory
        SWITCHYARD_LOG_LEVEL       DEBUG/INFO/WARNING/ERROR/CRITICAL
        SWITCHYARD_LOG_FORMAT      text or json

        SWITCHYARD_ENV is not read here: it selects the mode, see App.run().

        =====================================================================
        """
        environ = os.environ if environ is None else environ
        config = cls()
        for suffix, (key, parse) in _ENV_KEYS.items():
            raw = environ.get(prefix + suffix)
            if raw is not None:
                config.set(key, parse(raw))
        return config

    def validate(self) -> None:
        """Fail fast on settings the framework itself consumes."""
        log_level = self.get("log_level")
        if log_level is not None and str(log_level).upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {log_level}. Must be one of {', '.join(LOG_LEVELS)}.")

        if self.get("log_format") not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.get('log_format')}. Must be 'text' or 'json'.")

        if not isinstance(self.get("views"), str):
            raise ValueError("views must be a directory path string")
