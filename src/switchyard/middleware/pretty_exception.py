"""
Debug exception page.

Added automatically by the App's default 'run' hook when `debug` is on.
Failures in the units after it are rendered as a traceback instead of the
fixed "Error occurred" page: an HTML ``<pre>`` block over HTTP, plain text
on the command line.
"""

import html
import logging
import traceback

from ..errors import ControlSignal
from .base import Middleware


logger = logging.getLogger(__name__)


class PrettyException(Middleware):
    """Render failures of the rest of the chain as a traceback (status 500)."""

    def call(self) -> None:
        try:
            self.next()
        except ControlSignal:
            raise
        except Exception as exc:
            app = self.app
            logger.exception(f"Error while dispatching {app.input.path()!r}")

            trace = traceback.format_exc()
            if app.is_cli():
                body = trace
            else:
                title = html.escape(f"{type(exc).__name__}: {exc}")
                body = (
                    f"<h1>{title}</h1>\n"
                    f"<pre>{html.escape(trace)}</pre>\n"
                )
                app.output.header("Content-Type", "text/html; charset=utf-8")

            app.buffer.clean_all()
            app.output.status(500)
            app.output.body(body)
            app.emitter.emit("error", exc)
