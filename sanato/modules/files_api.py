#!/usr/bin/env python3
"""File API.

Bearer-authenticated access to the storage data root:

    GET    /files/<path>  file content, or a JSON listing for directories
    PUT    /files/<path>  upload (replaces an existing file)
    POST   /files/<path>  create a directory
    DELETE /files/<path>  remove a file or directory tree
"""

import mimetypes
from typing import Dict

from sanato.auth.credentials import User
from sanato.auth.tokens import TokenAuthenticator, TokenIssuer
from sanato.core.constants import FILES_URL, ErrorCode
from sanato.core.errors import StorageError, TokenError
from sanato.http.access_log import record_user
from sanato.http.wsgi import HTTPError, Request, Response, file_body, json_response
from sanato.modules.base import Module, ModuleDeps

STORAGE_STATUS = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.INVALID_INPUT: 400,
}


def _storage_http_error(error: StorageError) -> HTTPError:
    return HTTPError(STORAGE_STATUS.get(error.error_code, 500), error.message)


class FilesAPI(Module):
    """REST-style access to stored files."""

    name = "files"

    def __init__(self, deps: ModuleDeps):
        super().__init__(deps)
        self.authenticator = TokenAuthenticator(TokenIssuer.from_config(self.config), self.credentials)

    def start(self) -> None:
        pattern = f"{FILES_URL}/*path"
        self.router.get(pattern, self.download)
        self.router.put(pattern, self.upload)
        self.router.post(pattern, self.make_dir)
        self.router.delete(pattern, self.remove)

    def _user(self, request: Request) -> User:
        try:
            user = self.authenticator.authenticate(request.header("Authorization"))
        except TokenError as e:
            raise HTTPError(401, e.message, [("WWW-Authenticate", "Bearer")])
        record_user(request.environ, user.username)
        return user

    def download(self, request: Request, params: Dict[str, str]) -> Response:
        self._user(request)
        path = params["path"]
        try:
            info = self.storage.stat(path)
            if info.is_dir:
                entries = [entry.to_dict() for entry in self.storage.list_dir(path)]
                return json_response({"path": info.path, "entries": entries})
            fh = self.storage.open_read(path)
        except StorageError as e:
            raise _storage_http_error(e)

        content_type, _ = mimetypes.guess_type(info.name)
        return Response(
            file_body(request.environ, fh),
            headers=[("Content-Length", str(info.size))],
            content_type=content_type or "application/octet-stream",
        )

    def upload(self, request: Request, params: Dict[str, str]) -> Response:
        user = self._user(request)
        path = params["path"]
        try:
            info = self.storage.write_stream(path, request.iter_body())
        except StorageError as e:
            raise _storage_http_error(e)
        self.logger.info("File uploaded", path=info.path, user=user.username, size=info.size)
        return json_response(info.to_dict(), status=201)

    def make_dir(self, request: Request, params: Dict[str, str]) -> Response:
        user = self._user(request)
        try:
            info = self.storage.make_dir(params["path"])
        except StorageError as e:
            raise _storage_http_error(e)
        self.logger.info("Directory created", path=info.path, user=user.username)
        return json_response(info.to_dict(), status=201)

    def remove(self, request: Request, params: Dict[str, str]) -> Response:
        user = self._user(request)
        try:
            self.storage.remove(params["path"])
        except StorageError as e:
            raise _storage_http_error(e)
        self.logger.info("Removed", path=params["path"], user=user.username)
        return Response(status=204)
