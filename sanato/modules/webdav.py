#!/usr/bin/env python3
"""WebDAV protocol endpoint.

Exposes the storage data root over WebDAV at ``/webdav`` using WsgiDAV.
Clients authenticate with HTTP Basic against the credential store.

The protocol state machine (PROPFIND, LOCK, MOVE, ...) is WsgiDAV's; this
module only wires it to Sanato's storage root and users.
"""

from typing import Any, Dict, Optional

from wsgidav.dc.base_dc import BaseDomainController
from wsgidav.fs_dav_provider import FilesystemProvider
from wsgidav.wsgidav_app import WsgiDAVApp

from sanato.auth.credentials import CredentialStore
from sanato.core.constants import WEBDAV_URL
from sanato.http.access_log import record_user
from sanato.modules.base import Module, ModuleDeps

REALM = "Sanato"


class CredentialDomainController(BaseDomainController):
    """WsgiDAV domain controller backed by a CredentialStore.

    WsgiDAV instantiates the class itself, so the store is bound as a class
    attribute by ``bind_domain_controller``.
    """

    credentials: Optional[CredentialStore] = None

    def __init__(self, wsgidav_app, config):
        super().__init__(wsgidav_app, config)
        if self.credentials is None:
            raise RuntimeError("CredentialDomainController used without a bound credential store")

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.credentials.path})"

    def get_domain_realm(self, path_info: str, environ: Dict[str, Any]) -> str:
        return REALM

    def require_authentication(self, realm: str, environ: Dict[str, Any]) -> bool:
        return True

    def basic_auth_user(self, realm: str, user_name: str, password: str, environ: Dict[str, Any]) -> bool:
        if self.credentials.authenticate(user_name, password) is None:
            return False
        record_user(environ, user_name)
        return True

    def supports_http_digest_auth(self) -> bool:
        # Digest needs the plaintext (or HA1); only one-way hashes are stored
        return False

    def digest_auth_user(self, realm: str, user_name: str, environ: Dict[str, Any]) -> bool:
        return False


def bind_domain_controller(credentials: CredentialStore) -> type:
    """Create a domain controller class bound to a credential store."""
    return type(
        "BoundCredentialDomainController",
        (CredentialDomainController,),
        {"credentials": credentials},
    )


class WebDAVAPI(Module):
    """Mounts a WsgiDAV application over the data root."""

    name = "webdav"

    def __init__(self, deps: ModuleDeps):
        super().__init__(deps)
        self.app = WsgiDAVApp(self.build_dav_config())

    def build_dav_config(self) -> Dict[str, Any]:
        """WsgiDAV configuration for this deployment."""
        return {
            "mount_path": WEBDAV_URL,
            "provider_mapping": {
                "/": FilesystemProvider(str(self.storage.root_data_dir)),
            },
            "http_authenticator": {
                "domain_controller": bind_domain_controller(self.credentials),
                "accept_basic": True,
                "accept_digest": False,
                "default_to_digest": False,
            },
            "verbose": 1,
            "logging": {
                "enable": False,
                "enable_loggers": [],
            },
            "property_manager": True,
            "lock_storage": True,
            "dir_browser": {
                "enable": True,
            },
        }

    def start(self) -> None:
        self.router.mount(WEBDAV_URL, self.app)
        self.logger.info(f"WebDAV serving {self.storage.root_data_dir} at {WEBDAV_URL}")
