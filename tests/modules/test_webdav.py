"""Tests for the WebDAV endpoint."""
import base64

import pytest

from sanato.http.access_log import AccessLogMiddleware
from sanato.modules.webdav import (
    REALM,
    CredentialDomainController,
    WebDAVAPI,
    bind_domain_controller,
)


def basic(username, password):
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def webdav(deps):
    module = WebDAVAPI(deps)
    module.start()
    return module


class TestDomainController:
    """Test the credential-backed domain controller."""

    def test_unbound_class_refused(self):
        with pytest.raises(RuntimeError):
            CredentialDomainController(None, {})

    def test_basic_auth(self, credentials):
        controller = bind_domain_controller(credentials)(None, {})
        assert controller.basic_auth_user(REALM, "admin", "secret1", {})
        assert not controller.basic_auth_user(REALM, "admin", "wrong", {})
        assert not controller.basic_auth_user(REALM, "nobody", "secret1", {})

    def test_realm_and_policy(self, credentials):
        controller = bind_domain_controller(credentials)(None, {})
        assert controller.get_domain_realm("/docs", {}) == "Sanato"
        assert controller.require_authentication(REALM, {})
        assert not controller.supports_http_digest_auth()
        assert not controller.digest_auth_user(REALM, "admin", {})

    def test_bindings_are_independent(self, credentials, tmp_path, fast_hasher):
        from sanato.auth.credentials import CredentialStore

        other = CredentialStore(tmp_path / "other.json", hasher=fast_hasher)
        first = bind_domain_controller(credentials)
        second = bind_domain_controller(other)
        assert first.credentials is credentials
        assert second.credentials is other
        assert CredentialDomainController.credentials is None


class TestWebDAVAPI:
    """Test the mounted WsgiDAV application."""

    def test_config(self, deps):
        config = WebDAVAPI(deps).build_dav_config()
        assert config["mount_path"] == "/webdav"
        provider = config["provider_mapping"]["/"]
        assert str(deps.storage.root_data_dir) in str(provider.root_folder_path)
        assert config["http_authenticator"]["accept_basic"] is True
        assert config["http_authenticator"]["accept_digest"] is False

    def test_construction_leaves_router_untouched(self, deps):
        WebDAVAPI(deps)
        assert deps.router.mounts == []

    def test_start_mounts(self, webdav, router):
        assert router.mounts == ["/webdav"]

    def test_requires_authentication(self, webdav, router, wsgi):
        result = wsgi(router, "GET", "/webdav/")
        assert result.status == 401
        assert "Basic" in result.headers["WWW-Authenticate"]

    def test_wrong_password(self, webdav, router, wsgi):
        result = wsgi(router, "GET", "/webdav/", headers=basic("admin", "wrong"))
        assert result.status == 401

    def test_get_file(self, webdav, router, wsgi, storage):
        storage.write_stream("notes.txt", [b"over webdav"])
        result = wsgi(router, "GET", "/webdav/notes.txt", headers=basic("admin", "secret1"))
        assert result.status == 200
        assert result.body == b"over webdav"

    def test_access_log_names_user(self, webdav, router, wsgi, storage, logger, recorder):
        storage.write_stream("notes.txt", [b"over webdav"])
        app = AccessLogMiddleware(router, logger.child("access"))
        wsgi(app, "GET", "/webdav/notes.txt", headers=basic("admin", "secret1"))

        access = [r.getMessage() for r in recorder.records if r.name == "sanato.test.access"]
        assert len(access) == 1
        assert " - admin [" in access[0]
        assert '"GET /webdav/notes.txt HTTP/1.0" 200' in access[0]

    def test_access_log_anonymous_on_failed_login(self, webdav, router, wsgi, logger, recorder):
        app = AccessLogMiddleware(router, logger.child("access"))
        wsgi(app, "GET", "/webdav/", headers=basic("admin", "wrong"))

        access = [r.getMessage() for r in recorder.records if r.name == "sanato.test.access"]
        assert len(access) == 1
        assert access[0].split(" ")[2] == "-"
