"""Tests for the file API."""
import pytest

from sanato.auth.tokens import TokenIssuer
from sanato.http.access_log import AccessLogMiddleware
from sanato.modules.files_api import FilesAPI


@pytest.fixture
def files_api(deps):
    module = FilesAPI(deps)
    module.start()
    return module


@pytest.fixture
def auth(sample_config, credentials):
    token = TokenIssuer.from_config(sample_config).issue(credentials.get_user("admin"))
    return {"Authorization": f"Bearer {token}"}


class TestAuthentication:
    """Every route requires a bearer token."""

    @pytest.mark.parametrize("method", ["GET", "PUT", "POST", "DELETE"])
    def test_missing_token(self, files_api, router, wsgi, method):
        result = wsgi(router, method, "/files/a.txt")
        assert result.status == 401
        assert result.headers["WWW-Authenticate"] == "Bearer"

    def test_token_from_other_deployment(self, files_api, router, wsgi, credentials):
        token = TokenIssuer("some-other-secret-123", "HS256").issue(credentials.get_user("admin"))
        result = wsgi(router, "GET", "/files/", headers={"Authorization": f"Bearer {token}"})
        assert result.status == 401


class TestFilesAPI:
    """Test file operations over HTTP."""

    def test_upload_and_download(self, files_api, router, wsgi, auth, storage):
        result = wsgi(router, "PUT", "/files/notes.txt", b"hello world", auth)
        assert result.status == 201
        assert result.json()["path"] == "/notes.txt"
        assert result.json()["size"] == 11
        assert (storage.root_data_dir / "notes.txt").read_bytes() == b"hello world"

        result = wsgi(router, "GET", "/files/notes.txt", headers=auth)
        assert result.status == 200
        assert result.body == b"hello world"
        assert result.headers["Content-Type"] == "text/plain"
        assert result.headers["Content-Length"] == "11"

    def test_head(self, files_api, router, wsgi, auth):
        wsgi(router, "PUT", "/files/a.bin", b"12345", auth)
        result = wsgi(router, "HEAD", "/files/a.bin", headers=auth)
        assert result.status == 200
        assert result.body == b""
        assert result.headers["Content-Length"] == "5"
        assert result.headers["Content-Type"] == "application/octet-stream"

    def test_directory_listing(self, files_api, router, wsgi, auth):
        wsgi(router, "POST", "/files/docs", headers=auth)
        wsgi(router, "PUT", "/files/docs/b.md", b"b", auth)
        wsgi(router, "PUT", "/files/docs/a.md", b"a", auth)

        result = wsgi(router, "GET", "/files/docs", headers=auth)
        assert result.status == 200
        data = result.json()
        assert data["path"] == "/docs"
        assert [e["name"] for e in data["entries"]] == ["a.md", "b.md"]
        assert all(e["type"] == "file" for e in data["entries"])

    def test_root_listing(self, files_api, router, wsgi, auth):
        result = wsgi(router, "GET", "/files/", headers=auth)
        assert result.status == 200
        assert result.json() == {"path": "/", "entries": []}

    def test_mkdir(self, files_api, router, wsgi, auth, storage):
        result = wsgi(router, "POST", "/files/docs", headers=auth)
        assert result.status == 201
        assert result.json()["type"] == "directory"
        assert (storage.root_data_dir / "docs").is_dir()

        assert wsgi(router, "POST", "/files/docs", headers=auth).status == 409

    def test_delete(self, files_api, router, wsgi, auth):
        wsgi(router, "PUT", "/files/a.txt", b"a", auth)
        result = wsgi(router, "DELETE", "/files/a.txt", headers=auth)
        assert result.status == 204
        assert result.body == b""
        assert wsgi(router, "GET", "/files/a.txt", headers=auth).status == 404

    def test_delete_root_forbidden(self, files_api, router, wsgi, auth):
        assert wsgi(router, "DELETE", "/files/", headers=auth).status == 403

    def test_missing_file(self, files_api, router, wsgi, auth):
        result = wsgi(router, "GET", "/files/missing.txt", headers=auth)
        assert result.status == 404
        assert "error" in result.json()

    def test_upload_missing_parent(self, files_api, router, wsgi, auth):
        assert wsgi(router, "PUT", "/files/nope/a.txt", b"a", auth).status == 404

    def test_upload_over_directory(self, files_api, router, wsgi, auth):
        wsgi(router, "POST", "/files/docs", headers=auth)
        assert wsgi(router, "PUT", "/files/docs", b"a", auth).status == 409

    def test_traversal(self, files_api, router, wsgi, auth):
        assert wsgi(router, "GET", "/files/../config.json", headers=auth).status == 403

    def test_upload_logged_with_user(self, files_api, router, wsgi, auth, recorder):
        wsgi(router, "PUT", "/files/a.txt", b"a", auth)
        assert any(
            m.startswith("File uploaded") and "user=admin" in m for m in recorder.messages
        )

    def test_access_log_names_user(self, files_api, router, wsgi, auth, logger, recorder):
        app = AccessLogMiddleware(router, logger.child("access"))
        wsgi(app, "GET", "/files/", headers=auth)

        access = [r.getMessage() for r in recorder.records if r.name == "sanato.test.access"]
        assert len(access) == 1
        assert " - admin [" in access[0]
