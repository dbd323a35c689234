"""
=============================================================================
HTTP INPUT (WSGI ENVIRON)
=============================================================================

Exposes a WSGI environ (PEP 3333) through the Input interface.

    environ key               exposed as
    ─────────────────────     ─────────────────────────────
    REQUEST_METHOD            method(), is_get(), is_post()...
    PATH_INFO                 path()
    SCRIPT_NAME               root_uri()
    QUERY_STRING              query(), query_list()
    HTTP_* / CONTENT_*        header()
    wsgi.input                body, json()
    anything                  env()

Only the path is needed for dispatch; the rest is for handlers.

=============================================================================
"""

import json
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import parse_qs

from ..transport import Input


class HttpInput(Input):
    """
    Request data read from a WSGI environ.

    Usage:
        input = HttpInput(environ)
        input.path()                    # "/users/42"
        input.query("page", "1")        # "3"
        input.header("Content-Type")    # "application/json"
    """

    def __init__(self, environ: Mapping[str, Any]):
        super().__init__()
        self.environ = environ
        self._headers: Optional[Dict[str, str]] = None
        self._query: Optional[Dict[str, List[str]]] = None
        self._body: Optional[bytes] = None
        self._body_json: Any = None

    # =========================================================================
    # REQUEST LINE
    # =========================================================================

    def path(self) -> str:
        return self.environ.get("PATH_INFO") or "/"

    def method(self) -> str:
        return str(self.environ.get("REQUEST_METHOD", "GET")).upper()

    def root_uri(self) -> str:
        return self.environ.get("SCRIPT_NAME") or "/"

    def env(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.environ.get(name, default)

    def is_ajax(self) -> bool:
        return self.header("X-Requested-With").lower() == "xmlhttprequest"

    # =========================================================================
    # HEADERS
    # =========================================================================

    @property
    def headers(self) -> Dict[str, str]:
        """Headers keyed by lowercase, dash-separated name."""
        if self._headers is None:
            headers = {}
            for key, value in self.environ.items():
                if key.startswith("HTTP_"):
                    headers[key[5:].replace("_", "-").lower()] = value
                elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
                    headers[key.replace("_", "-").lower()] = value
            self._headers = headers
        return self._headers

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("; charset=utf-8")."""
        content_type = self.header("content-type").split(";")[0].strip().lower()
        return content_type or None

    @property
    def content_length(self) -> int:
        try:
            return int(self.header("content-length", "0") or 0)
        except ValueError:
            return 0

    @property
    def is_json(self) -> bool:
        return self.content_type == "application/json"

    # =========================================================================
    # QUERY AND BODY
    # =========================================================================

    @property
    def query_params(self) -> Dict[str, List[str]]:
        if self._query is None:
            self._query = parse_qs(self.environ.get("QUERY_STRING", ""), keep_blank_values=True)
        return self._query

    def query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default

    def query_list(self, name: str) -> List[str]:
        return self.query_params.get(name, [])

    @property
    def body(self) -> bytes:
        """Raw request body, read once from wsgi.input."""
        if self._body is None:
            stream = self.environ.get("wsgi.input")
            length = self.content_length
            self._body = stream.read(length) if stream is not None and length > 0 else b""
        return self._body

    def json(self) -> Any:
        """
        Parse the body as JSON (cached).

        Raises:
            ValueError: If the body is not valid JSON.
        """
        if self._body_json is None and self.body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ValueError(f"Invalid JSON body: {e}") from e
        return self._body_json
