"""Minimal WSGI request/response helpers shared by the router and modules."""

import json
from http import HTTPStatus
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from wsgiref.util import FileWrapper

from sanato.core.constants import Limits

Headers = List[Tuple[str, str]]


class HTTPError(Exception):
    """Raised by handlers to produce an error response."""

    def __init__(self, status: int, message: str = "", headers: Optional[Headers] = None):
        self.status = status
        self.message = message or HTTPStatus(status).phrase
        self.headers = headers or []
        super().__init__(self.message)


def status_line(status: int) -> str:
    return f"{status} {HTTPStatus(status).phrase}"


class Request:
    """Read-only view over a WSGI environ."""

    def __init__(self, environ: Dict[str, Any]):
        self.environ = environ

    @property
    def method(self) -> str:
        return self.environ.get("REQUEST_METHOD", "GET").upper()

    @property
    def path(self) -> str:
        return self.environ.get("PATH_INFO", "") or "/"

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return a request header by its HTTP name."""
        key = name.upper().replace("-", "_")
        if key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            return self.environ.get(key, default)
        return self.environ.get(f"HTTP_{key}", default)

    @property
    def content_length(self) -> Optional[int]:
        value = self.environ.get("CONTENT_LENGTH")
        if not value:
            return None
        try:
            length = int(value)
        except ValueError:
            raise HTTPError(400, "Invalid Content-Length")
        if length < 0:
            raise HTTPError(400, "Invalid Content-Length")
        return length

    def iter_body(self, chunk_size: int = Limits.STREAM_CHUNK_SIZE) -> Iterable[bytes]:
        """Yield the request body in chunks."""
        stream = self.environ["wsgi.input"]
        remaining = self.content_length
        while remaining is None or remaining > 0:
            size = chunk_size if remaining is None else min(chunk_size, remaining)
            chunk = stream.read(size)
            if not chunk:
                break
            if remaining is not None:
                remaining -= len(chunk)
            yield chunk

    def json(self, limit: int = Limits.MAX_JSON_BODY) -> Any:
        """Decode a JSON request body.

        Raises:
            HTTPError: 413 if larger than limit, 400 if not valid JSON
        """
        length = self.content_length or 0
        if length > limit:
            raise HTTPError(413, f"Body larger than {limit} bytes")
        raw = self.environ["wsgi.input"].read(length) if length else b""
        try:
            return json.loads(raw.decode("utf-8")) if raw else None
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise HTTPError(400, f"Invalid JSON body: {e}")


class Response:
    """A status, headers and an iterable body."""

    def __init__(
        self,
        body: Union[bytes, Iterable[bytes]] = b"",
        status: int = 200,
        headers: Optional[Headers] = None,
        content_type: Optional[str] = None,
    ):
        self.status = status
        self.headers: Headers = list(headers or [])
        if content_type:
            self.headers.append(("Content-Type", content_type))
        if isinstance(body, bytes):
            if status not in (204, 304):
                self.headers.append(("Content-Length", str(len(body))))
            self.body: Iterable[bytes] = [body]
        else:
            self.body = body

    def __call__(self, environ: Dict[str, Any], start_response) -> Iterable[bytes]:
        start_response(status_line(self.status), self.headers)
        if environ.get("REQUEST_METHOD") == "HEAD":
            close = getattr(self.body, "close", None)
            if close is not None:
                close()
            return [b""]
        return self.body


def json_response(data: Any, status: int = 200, headers: Optional[Headers] = None) -> Response:
    body = json.dumps(data).encode("utf-8")
    return Response(body, status=status, headers=headers, content_type="application/json")


def error_response(error: HTTPError) -> Response:
    return json_response({"error": error.message}, status=error.status, headers=error.headers)


def file_body(environ: Dict[str, Any], fh) -> Iterable[bytes]:
    """Stream an open file in chunks.

    Uses the server's wsgi.file_wrapper when offered. Either way the
    returned iterable closes the file when the server closes the response.
    """
    wrapper = environ.get("wsgi.file_wrapper", FileWrapper)
    return wrapper(fh, Limits.STREAM_CHUNK_SIZE)
