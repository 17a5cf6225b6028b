"""Shared pytest fixtures for Sanato tests."""
import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from wsgiref.util import setup_testing_defaults

import pytest

from sanato.auth.credentials import CredentialStore
from sanato.auth.hashing import PasswordHasher
from sanato.core.config import Config, ConfigProvider
from sanato.core.logging import Logger
from sanato.http.router import Router
from sanato.modules.base import ModuleDeps
from sanato.storage.provider import StorageProvider

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "secret1"


class RecordingHandler(logging.Handler):
    """Collects formatted log messages in memory."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> List[str]:
        return [record.getMessage() for record in self.records]


@dataclass
class WSGIResult:
    """Captured response of one WSGI call."""

    status: int
    headers: Dict[str, str]
    body: bytes = b""
    header_list: List = field(default_factory=list)

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def call_wsgi(
    app: Callable,
    method: str = "GET",
    path: str = "/",
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
) -> WSGIResult:
    """Call a WSGI application with a test environ and collect the response."""
    path, _, query = path.partition("?")
    environ: Dict[str, Any] = {
        "REQUEST_METHOD": method,
        "SCRIPT_NAME": "",
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "wsgi.input": io.BytesIO(body),
    }
    if body:
        environ["CONTENT_LENGTH"] = str(len(body))
    for name, value in (headers or {}).items():
        key = name.upper().replace("-", "_")
        if key not in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            key = f"HTTP_{key}"
        environ[key] = value
    setup_testing_defaults(environ)

    captured: Dict[str, Any] = {}

    def start_response(status, response_headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = response_headers
        return lambda data: None

    result = app(environ, start_response)
    try:
        data = b"".join(result)
    finally:
        close = getattr(result, "close", None)
        if close is not None:
            close()

    return WSGIResult(
        status=int(captured["status"].split(" ", 1)[0]),
        headers=dict(captured["headers"]),
        body=data,
        header_list=list(captured["headers"]),
    )


@pytest.fixture
def wsgi():
    """The call_wsgi helper."""
    return call_wsgi


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def logger(recorder: RecordingHandler) -> Logger:
    """Test logger writing into the recorder."""
    return Logger("sanato.test", level="DEBUG", handlers=[recorder])


@pytest.fixture
def fast_hasher() -> PasswordHasher:
    """Argon2id with minimal work factors."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def sample_config(tmp_path: Path) -> Config:
    """Config pointing at directories under tmp_path."""
    return Config(
        port=8000,
        root_data_dir=str(tmp_path / "data"),
        root_temp_dir=str(tmp_path / "tmp"),
        token_secret="abcdefghij0123456789",
        token_cipher_suite="HS256",
        web_url="/web",
        web_dir=str(tmp_path / "web"),
    )


@pytest.fixture
def config_provider(tmp_path: Path, sample_config: Config) -> ConfigProvider:
    """Provider whose config file has been created."""
    provider = ConfigProvider(tmp_path / "config.json")
    provider.create_new_config(sample_config)
    return provider


@pytest.fixture
def credentials(tmp_path: Path, fast_hasher: PasswordHasher) -> CredentialStore:
    """Credential store holding the admin account."""
    store = CredentialStore(tmp_path / "auth.json", hasher=fast_hasher)
    store.create_user(ADMIN_USERNAME, ADMIN_PASSWORD, "Admin", "admin@example.com")
    return store


@pytest.fixture
def storage(sample_config: Config) -> StorageProvider:
    return StorageProvider(sample_config.root_data_dir, sample_config.root_temp_dir)


@pytest.fixture
def router(logger: Logger) -> Router:
    return Router(logger=logger)


@pytest.fixture
def deps(router, config_provider, credentials, storage, logger) -> ModuleDeps:
    """Module dependencies wired to temporary files."""
    return ModuleDeps(
        router=router,
        config=config_provider,
        credentials=credentials,
        storage=storage,
        logger=logger,
    )

