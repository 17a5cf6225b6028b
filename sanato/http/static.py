"""Static asset serving for the web client.

Serves files from one directory under a mount prefix. Directories are
answered with their ``index.html`` when present, otherwise with an HTML
listing rendered by Jinja2.
"""

import mimetypes
from email.utils import formatdate
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import quote

import jinja2

from sanato.core.logging import Logger, get_logger
from sanato.http.wsgi import HTTPError, Response, error_response, file_body

INDEX_FILE = "index.html"

LISTING_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Index of {{ path }}</title></head>
<body>
<h1>Index of {{ path }}</h1>
<ul>
{% for entry in entries %}  <li><a href="{{ entry.href }}">{{ entry.name }}{% if entry.is_dir %}/{% endif %}</a></li>
{% endfor %}</ul>
</body>
</html>
"""


def _within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


class StaticFiles:
    """WSGI application serving a directory read-only.

    Paths listed in ``exclude`` (files or whole directory trees) are
    answered with 404 and left out of listings, even when they sit inside
    the served directory.
    """

    def __init__(
        self,
        directory: str,
        logger: Optional[Logger] = None,
        exclude: Iterable[Union[str, Path]] = (),
    ):
        self.directory = Path(directory).resolve()
        self.logger = logger or get_logger()
        self.exclude: List[Path] = [Path(path).resolve() for path in exclude]
        self._env = jinja2.Environment(autoescape=True)
        self._listing = self._env.from_string(LISTING_TEMPLATE)

    def is_excluded(self, real: Path) -> bool:
        return any(_within(real, hidden) for hidden in self.exclude)

    def _resolve(self, path_info: str) -> Path:
        candidate = (self.directory / path_info.lstrip("/")).resolve()
        if not _within(candidate, self.directory) or self.is_excluded(candidate):
            raise HTTPError(404)
        if not candidate.exists():
            raise HTTPError(404)
        return candidate

    def _serve_file(self, environ: Dict[str, Any], real: Path) -> Response:
        content_type, encoding = mimetypes.guess_type(real.name)
        st = real.stat()
        headers = [
            ("Content-Length", str(st.st_size)),
            ("Last-Modified", formatdate(st.st_mtime, usegmt=True)),
        ]
        if encoding:
            headers.append(("Content-Encoding", encoding))
        body = file_body(environ, open(real, "rb"))
        return Response(body, headers=headers, content_type=content_type or "application/octet-stream")

    def _render_listing(self, url_path: str, real: Path) -> Response:
        entries = []
        for child in sorted(real.iterdir(), key=lambda p: p.name):
            if self.is_excluded(child.resolve()):
                continue
            is_dir = child.is_dir()
            entries.append(
                {
                    "name": child.name,
                    "href": quote(child.name) + ("/" if is_dir else ""),
                    "is_dir": is_dir,
                }
            )
        html = self._listing.render(path=url_path, entries=entries)
        return Response(html.encode("utf-8"), content_type="text/html; charset=utf-8")

    def __call__(self, environ: Dict[str, Any], start_response) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET").upper()
        raw_path = environ.get("PATH_INFO", "")
        path_info = raw_path or "/"
        url_path = environ.get("SCRIPT_NAME", "") + raw_path

        try:
            if method not in ("GET", "HEAD"):
                raise HTTPError(405, headers=[("Allow", "GET, HEAD")])

            real = self._resolve(path_info)
            if real.is_dir():
                if not url_path.endswith("/"):
                    location = quote(url_path) + "/"
                    response = Response(status=301, headers=[("Location", location)])
                    return response(environ, start_response)
                index = real / INDEX_FILE
                if index.is_file():
                    response = self._serve_file(environ, index)
                else:
                    response = self._render_listing(url_path, real)
            else:
                response = self._serve_file(environ, real)
        except HTTPError as e:
            response = error_response(e)
        except OSError as e:
            self.logger.error(f"Static file error: {e}", path=url_path)
            response = error_response(HTTPError(500))

        return response(environ, start_response)

