"""
=============================================================================
TRANSPORT ADAPTERS
=============================================================================

The application never talks to WSGI or to a terminal directly. It talks to
an Input and an Output adapter:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                ┌──────────── App ────────────┐                      │
    │                │                              │                      │
    │            Input                          Output                     │
    │      path / method / env / params   status / headers / body         │
    │                │                              │                      │
    │       ┌────────┴────────┐            ┌────────┴────────┐             │
    │   HttpInput        CliInput      HttpOutput        CliOutput         │
    │  (WSGI environ)    (argv)      (start_response)   (text stream)      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Union


class Input(ABC):
    """Request-side adapter."""

    def __init__(self):
        # Filled by the router from the matched route pattern
        self.params: Dict[str, str] = {}
        self.args: Tuple[str, ...] = ()

    @abstractmethod
    def path(self) -> str:
        """Route path to dispatch, e.g. "/users/42"."""
        pass

    @abstractmethod
    def method(self) -> str:
        """Upper-case request method; "CLI" on the command line."""
        pass

    def env(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return os.environ.get(name, default)

    def root_uri(self) -> str:
        return "/"

    def is_method(self, method: str) -> bool:
        return self.method() == method.upper()

    def is_get(self) -> bool:
        return self.is_method("GET")

    def is_post(self) -> bool:
        return self.is_method("POST")

    def is_put(self) -> bool:
        return self.is_method("PUT")

    def is_delete(self) -> bool:
        return self.is_method("DELETE")

    def is_options(self) -> bool:
        return self.is_method("OPTIONS")

    def is_head(self) -> bool:
        return self.is_method("HEAD")


class Output(ABC):
    """
    Response-side adapter.

    The body is accumulated as text; send() hands the final bytes to the
    transport.
    """

    charset = "utf-8"

    def __init__(self):
        self._status = 200
        self._headers: Dict[str, str] = {}
        self._body: List[str] = []
        self.headers_sent = False

    def status(self, code: Optional[int] = None) -> Union[int, "Output"]:
        """Get the status code, or set it and return self."""
        if code is None:
            return self._status
        self._status = int(code)
        return self

    def header(self, name: str, value: Optional[str] = None) -> Any:
        """Get a header (case-insensitive), or set it and return self."""
        if value is None:
            for key, current in self._headers.items():
                if key.lower() == name.lower():
                    return current
            return None
        for key in list(self._headers):
            if key.lower() == name.lower():
                del self._headers[key]
        self._headers[name] = str(value)
        return self

    def header_items(self) -> List[Tuple[str, str]]:
        return list(self._headers.items())

    def write(self, data: Union[str, bytes]) -> "Output":
        """Append to the body."""
        if isinstance(data, bytes):
            data = data.decode(self.charset)
        if data:
            self._body.append(data)
        return self

    def body(self, data: Union[str, bytes, None] = None) -> Any:
        """Get the body, or replace it and return self."""
        if data is None:
            return "".join(self._body)
        self._body = []
        return self.write(data)

    def send_header(self) -> None:
        """Transmit status and headers. Only meaningful for HTTP."""
        self.headers_sent = True

    @abstractmethod
    def send(self, data: Union[str, bytes]) -> None:
        """Hand the final body to the transport."""
        pass
