"""Sanato HTTP layer: shared router, static files, access logging."""

from .access_log import AccessLogMiddleware
from .router import Router
from .static import StaticFiles
from .wsgi import HTTPError, Request, Response, json_response

__all__ = [
    "AccessLogMiddleware",
    "Router",
    "StaticFiles",
    "HTTPError",
    "Request",
    "Response",
    "json_response",
]
