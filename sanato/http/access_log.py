"""Access logging middleware.

Writes one Apache combined-format line per request to the
``<name>.access`` logger once the response body has been sent.

Mounted applications run on a copy of the environ made by cheroot's
PathInfoDispatcher, so a ``REMOTE_USER`` they set never reaches this
middleware. Instead the middleware plants a mutable slot under
``ACCESS_USER_KEY`` before dispatching; the copy is shallow, so
``record_user`` called anywhere downstream fills in the logged user.
"""

import time
from typing import Any, Callable, Dict, Iterable, Optional

from sanato.core.logging import Logger

ACCESS_USER_KEY = "sanato.access_user"


def record_user(environ: Dict[str, Any], username: str) -> None:
    """Report the authenticated user of a request to the access log."""
    slot = environ.get(ACCESS_USER_KEY)
    if slot is not None:
        slot["user"] = username


def format_combined(
    environ: Dict[str, Any],
    status: str,
    size: int,
    now: Optional[float] = None,
    user: Optional[str] = None,
) -> str:
    """Format one combined log line.

    ``host ident user [time] "request" status size "referer" "user-agent"``
    """
    timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z", time.localtime(now))
    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    query = environ.get("QUERY_STRING")
    if query:
        path = f"{path}?{query}"
    request_line = f"{environ.get('REQUEST_METHOD', '-')} {path} {environ.get('SERVER_PROTOCOL', '-')}"
    user = user or environ.get("REMOTE_USER") or "-"
    return (
        f"{environ.get('REMOTE_ADDR', '-')} - {user} "
        f"[{timestamp}] \"{request_line}\" {status} {size if size else '-'} "
        f"\"{environ.get('HTTP_REFERER', '-')}\" \"{environ.get('HTTP_USER_AGENT', '-')}\""
    )


class AccessLogMiddleware:
    """Wraps a WSGI application and logs every request it answers."""

    def __init__(self, app: Callable, logger: Logger):
        self.app = app
        self.logger = logger

    def __call__(self, environ: Dict[str, Any], start_response) -> Iterable[bytes]:
        captured = {"status": "-"}
        environ[ACCESS_USER_KEY] = {}

        def _start_response(status, headers, exc_info=None):
            captured["status"] = status.split(" ", 1)[0]
            return start_response(status, headers, exc_info)

        body = self.app(environ, _start_response)
        return self._iter_logged(environ, body, captured)

    def _iter_logged(self, environ, body, captured) -> Iterable[bytes]:
        size = 0
        try:
            for chunk in body:
                size += len(chunk)
                yield chunk
        finally:
            close = getattr(body, "close", None)
            if close is not None:
                close()
            user = environ[ACCESS_USER_KEY].get("user")
            self.logger.info(format_combined(environ, captured["status"], size, user=user))
