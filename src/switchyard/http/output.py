"""
=============================================================================
HTTP OUTPUT (WSGI start_response)
=============================================================================

Collects status, headers and body, then hands them to the WSGI server:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RESPONSE LIFECYCLE                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   handlers / app          send_header()            send(body)        │
    │   status(), header(),  ─► start_response(    ─►    output.sent       │
    │   body()                    "200 OK",              [b"..."]          │
    │                             [(name, value)])       returned to WSGI  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

send_header() is idempotent: only the first call reaches start_response.

=============================================================================
"""

import json
from typing import Any, Callable, List, Optional, Tuple, Union

from ..transport import Output
from .status_codes import status_line


StartResponse = Callable[[str, List[Tuple[str, str]]], Any]


class HttpOutput(Output):
    """
    Response adapter for WSGI.

    Usage:
        output = HttpOutput(start_response)
        output.status(201).header("Location", "/users/7")
        output.body("created")
        output.send_header()
        output.send(output.body())
        return output.sent
    """

    default_content_type = "text/html; charset=utf-8"

    def __init__(self, start_response: Optional[StartResponse] = None):
        super().__init__()
        self.start_response = start_response
        self.sent: List[bytes] = []

    @property
    def status_line(self) -> str:
        return status_line(self._status)

    def json(self, data: Any, pretty: bool = False) -> "HttpOutput":
        """Replace the body with JSON and set the Content-Type."""
        self.header("Content-Type", "application/json; charset=utf-8")
        self.body(json.dumps(data, indent=2 if pretty else None))
        return self

    def send_header(self) -> None:
        if self.headers_sent:
            return
        if self.header("Content-Type") is None:
            self.header("Content-Type", self.default_content_type)
        if self.start_response is not None:
            self.start_response(self.status_line, self.header_items())
        self.headers_sent = True

    def send(self, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode(self.charset)
        self.sent.append(data)
