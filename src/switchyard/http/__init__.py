"""
HTTP transport: WSGI environ in, start_response + body iterable out.

    HttpInput          request adapter over a WSGI environ
    HttpOutput         response adapter collecting status, headers, body
    WSGIApplication    one App per request, hostable by any WSGI server
"""

from .input import HttpInput
from .output import HttpOutput
from .status_codes import HTTPStatus, status_line
from .wsgi import WSGIApplication, make_application, serve

__all__ = [
    "HttpInput",
    "HttpOutput",
    "HTTPStatus",
    "status_line",
    "WSGIApplication",
    "make_application",
    "serve",
]
