"""
pytest configuration and fixtures.
"""

import io
from typing import Callable, Dict, List, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from switchyard import App
from switchyard.cli import CliInput, CliOutput
from switchyard.http import HttpInput, HttpOutput


@pytest.fixture(autouse=True)
def clear_mode_env(monkeypatch):
    """Keep the developer's SWITCHYARD_* environment out of the tests."""
    for name in ("SWITCHYARD_ENV", "SWITCHYARD_DEBUG", "SWITCHYARD_LOG_LEVEL", "SWITCHYARD_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def stream() -> io.StringIO:
    """Text stream standing in for stdout."""
    return io.StringIO()


@pytest.fixture
def make_cli_app(stream) -> Callable[..., App]:
    """
    Factory for command line apps writing to the `stream` fixture.

        app = make_cli_app(["/hello/Bob"], debug=True)
    """
    apps: List[App] = []

    def factory(argv: Optional[List[str]] = None, **config) -> App:
        app = App(config, input=CliInput(argv or ["/"]), output=CliOutput(stream))
        apps.append(app)
        return app

    yield factory

    # Drop the atexit hooks
    for app in apps:
        app.shutdown()


def make_environ(
    path: str = "/",
    method: str = "GET",
    query: str = "",
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
) -> dict:
    """Minimal PEP 3333 environ."""
    environ = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "QUERY_STRING": query,
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8000",
        "SERVER_PROTOCOL": "HTTP/1.1",
        "wsgi.input": io.BytesIO(body),
        "wsgi.url_scheme": "http",
    }
    if body:
        environ["CONTENT_LENGTH"] = str(len(body))
    for name, value in (headers or {}).items():
        key = name.upper().replace("-", "_")
        if key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            environ[key] = value
        else:
            environ[f"HTTP_{key}"] = value
    return environ


@pytest.fixture
def environ() -> Callable[..., dict]:
    """Factory for WSGI environs, see make_environ()."""
    return make_environ


class StartResponse:
    """Records what the app passed to start_response."""

    def __init__(self):
        self.status: Optional[str] = None
        self.headers: List[Tuple[str, str]] = []
        self.calls = 0

    def __call__(self, status: str, headers: List[Tuple[str, str]], exc_info=None):
        self.status = status
        self.headers = list(headers)
        self.calls += 1

    def header(self, name: str) -> Optional[str]:
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


@pytest.fixture
def start_response() -> StartResponse:
    return StartResponse()


@pytest.fixture
def make_http_app(start_response) -> Callable[..., App]:
    """
    Factory for HTTP apps over a fake WSGI environ.

        app = make_http_app("/users/7", method="POST")
    """
    apps: List[App] = []

    def factory(path: str = "/", method: str = "GET", config: Optional[dict] = None, **environ_kwargs) -> App:
        app = App(
            config,
            input=HttpInput(make_environ(path, method, **environ_kwargs)),
            output=HttpOutput(start_response),
        )
        apps.append(app)
        return app

    yield factory

    for app in apps:
        app.shutdown()
