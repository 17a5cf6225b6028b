#!/usr/bin/env python3
"""Shared HTTP router for Sanato modules.

This module provides the single WSGI entry point every module registers on:
- Exact routes: ``router.add("POST", "/auth/login", handler)``
- Catch-all routes: ``router.add("GET", "/files/*path", handler)``
- Sub-application mounts (WebDAV, static files) via cheroot's
  PathInfoDispatcher
- 404/405 handling and JSON error rendering

Registering the same method and pattern twice, or mounting two apps on the
same prefix, raises RouteConflictError while modules start, before any
request is served.

Example:
    >>> router = Router()
    >>> router.add("GET", "/auth/whoami", whoami)
    >>> router.mount("/webdav", dav_app)
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from cheroot.wsgi import PathInfoDispatcher

from sanato.core.errors import RouteConflictError
from sanato.core.logging import Logger, get_logger
from sanato.http.static import StaticFiles
from sanato.http.wsgi import HTTPError, Request, Response, error_response

Handler = Callable[[Request, Dict[str, str]], Response]
WSGIApp = Callable[[Dict[str, Any], Callable], Iterable[bytes]]

CATCH_ALL = "/*"


def _normalize_prefix(prefix: str) -> str:
    prefix = "/" + prefix.strip("/")
    return prefix


class Router:
    """Method/path router plus prefix-mounted WSGI sub-applications."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger()
        self._exact: Dict[str, Dict[str, Handler]] = {}
        # (prefix, param name) -> method -> handler
        self._catch_all: Dict[Tuple[str, str], Dict[str, Handler]] = {}
        self._mounts: Dict[str, WSGIApp] = {}
        self._dispatcher = self._build_dispatcher()

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        """Register a handler.

        Args:
            method: HTTP method
            pattern: Exact path, or ``<prefix>/*<name>`` to capture the
                remainder of the path as parameter ``name``
            handler: Callable taking (request, params) and returning a Response

        Raises:
            RouteConflictError: If the method and pattern are already registered
        """
        method = method.upper()
        if CATCH_ALL in pattern:
            prefix, name = pattern.split(CATCH_ALL, 1)
            key = (_normalize_prefix(prefix), name or "path")
            table = self._catch_all.setdefault(key, {})
        else:
            table = self._exact.setdefault(pattern, {})

        if method in table:
            raise RouteConflictError(f"Route already registered: {method} {pattern}")
        table[method] = handler
        self.logger.debug(f"Route added: {method} {pattern}")

    def get(self, pattern: str, handler: Handler) -> None:
        self.add("GET", pattern, handler)
        if "HEAD" not in self._methods_for(pattern):
            self.add("HEAD", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> None:
        self.add("POST", pattern, handler)

    def put(self, pattern: str, handler: Handler) -> None:
        self.add("PUT", pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> None:
        self.add("DELETE", pattern, handler)

    def _methods_for(self, pattern: str) -> Dict[str, Handler]:
        if CATCH_ALL in pattern:
            prefix, name = pattern.split(CATCH_ALL, 1)
            return self._catch_all.get((_normalize_prefix(prefix), name or "path"), {})
        return self._exact.get(pattern, {})

    def mount(self, prefix: str, app: WSGIApp) -> None:
        """Mount a WSGI application under a path prefix.

        The app sees the prefix in SCRIPT_NAME and the remainder in PATH_INFO.

        Raises:
            RouteConflictError: If the prefix is already mounted or is the root
        """
        prefix = _normalize_prefix(prefix)
        if prefix == "/":
            raise RouteConflictError("Cannot mount an application on the root path")
        if prefix in self._mounts:
            raise RouteConflictError(f"Prefix already mounted: {prefix}")
        self._mounts[prefix] = app
        self._dispatcher = self._build_dispatcher()
        self.logger.debug(f"Application mounted: {prefix}")

    def serve_files(self, prefix: str, directory: str, exclude: Iterable[str] = ()) -> None:
        """Mount static file serving of a directory under a prefix.

        Args:
            prefix: URL prefix
            directory: Directory to serve
            exclude: Files or directory trees never served from it
        """
        self.mount(prefix, StaticFiles(directory, logger=self.logger, exclude=exclude))

    @property
    def mounts(self) -> List[str]:
        return sorted(self._mounts)

    def routes(self) -> List[Tuple[str, str]]:
        """List registered (method, pattern) pairs."""
        found = [(m, p) for p, table in self._exact.items() for m in table]
        found += [
            (m, f"{prefix.rstrip('/')}/*{name}")
            for (prefix, name), table in self._catch_all.items()
            for m in table
        ]
        return sorted(found)

    def _build_dispatcher(self) -> PathInfoDispatcher:
        apps: Dict[str, WSGIApp] = dict(self._mounts)
        # "" matches every path, so unmatched requests reach the route table
        apps[""] = self._dispatch_routes
        return PathInfoDispatcher(apps)

    def _match(self, path: str) -> Tuple[Optional[Dict[str, Handler]], Dict[str, str]]:
        if path in self._exact:
            return self._exact[path], {}

        best: Optional[Tuple[str, str]] = None
        for prefix, name in self._catch_all:
            if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, name)
        if best is None:
            return None, {}

        prefix, name = best
        remainder = path[len(prefix):].lstrip("/")
        return self._catch_all[best], {name: remainder}

    def _dispatch_routes(self, environ: Dict[str, Any], start_response) -> Iterable[bytes]:
        # PathInfoDispatcher moved nothing into SCRIPT_NAME for the "" entry
        request = Request(environ)
        table, params = self._match(request.path)

        try:
            if table is None:
                raise HTTPError(404, f"No route for {request.path}")
            handler = table.get(request.method)
            if handler is None:
                allow = ", ".join(sorted(table))
                raise HTTPError(405, f"Method {request.method} not allowed", [("Allow", allow)])
            response = handler(request, params)
        except HTTPError as e:
            response = error_response(e)
        except Exception as e:
            self.logger.exception(f"Unhandled error on {request.method} {request.path}", e)
            response = error_response(HTTPError(500))

        return response(environ, start_response)

    def __call__(self, environ: Dict[str, Any], start_response) -> Iterable[bytes]:
        return self._dispatcher(environ, start_response)
