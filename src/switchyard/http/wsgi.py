"""
=============================================================================
WSGI ADAPTER
=============================================================================

Turns an application setup function into a WSGI (PEP 3333) callable that
any WSGI server (gunicorn, uWSGI, wsgiref) can host:

    # shop/app.py
    def setup(app):
        app.on("/", lambda app, next: "home")

    # gunicorn 'switchyard.http.wsgi:make_application("shop.app:setup")'
    # or: python -m switchyard serve shop.app:setup --port 8000

=============================================================================
ONE APP PER REQUEST
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   WSGI server ──► WSGIApplication(environ, start_response)           │
    │                        │                                             │
    │                        ├── App(config, HttpInput, HttpOutput)        │
    │                        ├── setup(app)        routes, middleware      │
    │                        ├── app.run()         dispatch + finalize     │
    │                        ├── app.shutdown()    always                  │
    │                        ▼                                             │
    │                   output.sent  ──► response body iterable            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Apps are cheap and hold per-request state (input, params, buffer), so a
fresh one is built per request and nothing is shared between threads
except the setup function and the configuration values.

=============================================================================
"""

import copy
import logging
from typing import Any, Callable, Iterable, Mapping, Union
from wsgiref.simple_server import make_server

from ..app import App
from ..config import Config
from ..utils import import_string
from .input import HttpInput
from .output import HttpOutput


logger = logging.getLogger(__name__)

Setup = Callable[[App], Any]


class WSGIApplication:
    """
    WSGI callable building one App per request.

    Usage:
        application = WSGIApplication(setup, {"views": "templates"})
    """

    def __init__(
        self,
        setup: Union[Setup, str],
        config: Union[Config, Mapping[str, Any], None] = None,
    ):
        self.setup: Setup = import_string(setup) if isinstance(setup, str) else setup
        if isinstance(config, Config):
            self.config_values = config.to_dict()
        else:
            self.config_values = Config.from_env().to_dict()
            self.config_values.update(config or {})

    def build(self, environ: Mapping[str, Any], start_response: Callable[..., Any]) -> App:
        """Create and set up the App for one request."""
        app = App(
            Config(copy.deepcopy(self.config_values)),
            input=HttpInput(environ),
            output=HttpOutput(start_response),
        )
        try:
            self.setup(app)
        except BaseException:
            # The App is already registered with atexit
            app.shutdown()
            raise
        return app

    def __call__(self, environ: Mapping[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        app = self.build(environ, start_response)
        try:
            app.run()
        finally:
            app.shutdown()
        return app.output.sent


def make_application(setup: Union[Setup, str], **config: Any) -> WSGIApplication:
    return WSGIApplication(setup, config)


def serve(
    application: WSGIApplication,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> None:
    """
    Serve `application` with the wsgiref development server (blocking).

    Not meant for production; use a real WSGI server there.
    """
    with make_server(host, port, application) as httpd:
        logger.info(f"Serving on http://{host}:{port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
    logger.info("Server stopped")
