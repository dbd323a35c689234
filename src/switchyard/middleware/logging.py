"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

Logs one line per run with timing, status and a correlation id, for both
HTTP requests and command line calls.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default, combined-log style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ [19/Oct/2026:10:55:36 +0000] a1b2c3d4 "GET /api" 200 5.23ms http    │
    │ ───────────────────────────────────────────────────────────────────│
    │ Timestamp                    Id       Method/Path Status Duration   │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "GET", "path": "/api",        │
    │  "transport": "http", "status_code": 200, "duration_ms": 5.23,     │
    │  "timestamp": "...", "mode": "production"}                          │
    └─────────────────────────────────────────────────────────────────────┘

The format comes from the `log_format` setting unless given explicitly.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import ControlSignal
from .base import Middleware


# Namespaced so deployments can route access logs separately:
#   logging.getLogger("switchyard.access").addHandler(file_handler)
logger = logging.getLogger("switchyard.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one run.

    request_id:   Short id, also sent as X-Request-ID over HTTP
    method:       HTTP method, or CLI
    path:         Route path that was dispatched
    transport:    "http" or "cli"
    status_code:  Final status
    duration_ms:  Time spent in the rest of the chain
    timestamp:    When the run finished
    mode:         App mode (development, production, ...)
    """

    request_id: str
    method: str
    path: str
    transport: str
    status_code: int
    duration_ms: float
    timestamp: str
    mode: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "transport": self.transport,
            "status_code": self.status_code,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
            "mode": self.mode,
        }

    def to_text(self) -> str:
        return (
            f'[{self.timestamp}] {self.request_id} '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.duration_ms:.2f}ms {self.transport}'
        )


class LoggingMiddleware(Middleware):
    """
    Access log middleware.

    Add it first so the timing covers the whole chain and runs ended by
    Stop, Pass or a failure are logged too:

        app.add(LoggingMiddleware())
        app.add(LoggingMiddleware(log_format="json", skip_paths=["/health"]))
    """

    def __init__(
        self,
        log_format: Optional[str] = None,
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[Iterable[str]] = None,
    ):
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def call(self) -> None:
        app = self.app
        request_id = str(uuid.uuid4())[:8]
        if self.include_request_id and not app.is_cli():
            app.output.header("X-Request-ID", request_id)

        start_time = time.time()
        try:
            self.next()
        except ControlSignal:
            self._log(request_id, start_time)
            raise
        except Exception as exc:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Run failed: {app.input.method()} {app.input.path()} "
                f"- {type(exc).__name__}: {exc} ({duration_ms:.2f}ms)"
            )
            raise
        self._log(request_id, start_time)

    def _log(self, request_id: str, start_time: float) -> None:
        app = self.app
        duration_ms = (time.time() - start_time) * 1000

        path = app.input.path()
        if path in self.skip_paths:
            return

        entry = RequestLog(
            request_id=request_id,
            method=app.input.method(),
            path=path,
            transport="cli" if app.is_cli() else "http",
            status_code=app.output.status(),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            mode=app.mode(),
        )

        log_format = self.log_format or app.config.get("log_format") or "text"
        if log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
