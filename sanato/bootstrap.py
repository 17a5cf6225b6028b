#!/usr/bin/env python3
"""Startup pipeline for Sanato.

This module drives the sequential bootstrap:
- Config: parse, or run the setup wizard when the file is missing
- Credentials: check, or create the first user when the file is missing
- Storage: validate the data and temp roots
- Modules: construct all, then start all, on one shared router

Each stage returns a StageResult. The pipeline stops at the first failed
stage and moves to BootstrapState.FATAL; nothing after it runs.

Example:
    >>> bootstrap = Bootstrap("config.json", "auth.json", logger=logger)
    >>> result = bootstrap.run()
    >>> if result.ok:
    ...     app = bootstrap.router
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Union

from sanato.auth.credentials import CredentialStore
from sanato.core.config import Config, ConfigProvider
from sanato.core.errors import ConfigNotFoundError, SanatoError
from sanato.core.logging import Logger, get_logger
from sanato.http.router import Router
from sanato.modules import DEFAULT_MODULES
from sanato.modules.base import Module, ModuleDeps
from sanato.modules.registry import ModuleFactory, ModuleRegistry
from sanato.storage.provider import StorageProvider
from sanato.wizard import Prompter, create_config_file, create_user


class BootstrapState(Enum):
    """States of the startup sequence."""

    UNCONFIGURED = "unconfigured"
    CONFIG_LOADING = "config_loading"
    CONFIG_FOUND = "config_found"
    CONFIG_MISSING = "config_missing"
    WIZARD_RUNNING = "wizard_running"
    CONFIG_CREATED = "config_created"
    CREDENTIAL_LOADING = "credential_loading"
    CREDENTIAL_FOUND = "credential_found"
    CREDENTIAL_MISSING = "credential_missing"
    USER_CREATED = "user_created"
    STORAGE_INIT = "storage_init"
    MODULES_CONSTRUCTING = "modules_constructing"
    MODULES_STARTING = "modules_starting"
    SERVING = "serving"
    FATAL = "fatal"


@dataclass
class StageResult:
    """Outcome of one bootstrap stage."""

    stage: str
    ok: bool
    value: Any = None
    error: Optional[SanatoError] = None

    @classmethod
    def success(cls, stage: str, value: Any = None) -> "StageResult":
        return cls(stage=stage, ok=True, value=value)

    @classmethod
    def failure(cls, stage: str, error: SanatoError) -> "StageResult":
        return cls(stage=stage, ok=False, error=error)


@dataclass
class BootstrapResult:
    """Outcome of the whole pipeline."""

    ok: bool
    state: BootstrapState
    stages: List[StageResult] = field(default_factory=list)

    @property
    def error(self) -> Optional[SanatoError]:
        for stage in self.stages:
            if not stage.ok:
                return stage.error
        return None

    @property
    def failed_stage(self) -> Optional[str]:
        for stage in self.stages:
            if not stage.ok:
                return stage.stage
        return None


class Bootstrap:
    """Runs the startup stages in order and records the state reached."""

    def __init__(
        self,
        config_path: Union[str, Path],
        auth_path: Union[str, Path],
        logger: Optional[Logger] = None,
        prompter: Optional[Prompter] = None,
        modules: Optional[Sequence[ModuleFactory]] = None,
    ):
        """Initialize bootstrap.

        Args:
            config_path: Location of the config file
            auth_path: Location of the credential file
            logger: Logger instance
            prompter: Source of wizard answers (defaults to stdin/stdout)
            modules: Module factories in start order (defaults to DEFAULT_MODULES)
        """
        self.logger = logger or get_logger()
        self.prompter = prompter
        self.config_provider = ConfigProvider(config_path)
        self.credentials = CredentialStore(auth_path)
        self.registry = ModuleRegistry(DEFAULT_MODULES if modules is None else modules, logger=self.logger)

        self.state = BootstrapState.UNCONFIGURED
        self.history: List[BootstrapState] = [self.state]
        self.config: Optional[Config] = None
        self.storage: Optional[StorageProvider] = None
        self.router: Optional[Router] = None
        self.modules: List[Module] = []

    def _transition(self, state: BootstrapState) -> None:
        self.logger.debug(f"Bootstrap state: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    # Stages

    def load_config(self) -> Config:
        self._transition(BootstrapState.CONFIG_LOADING)
        try:
            config = self.config_provider.parse()
        except ConfigNotFoundError:
            self._transition(BootstrapState.CONFIG_MISSING)
            self._transition(BootstrapState.WIZARD_RUNNING)
            config = create_config_file(self.config_provider, self.prompter, self.logger)
            self._transition(BootstrapState.CONFIG_CREATED)
        else:
            self._transition(BootstrapState.CONFIG_FOUND)
            self.logger.info("Configuration loaded", path=str(self.config_provider.path))
        self.config = config
        return config

    def load_credentials(self) -> CredentialStore:
        self._transition(BootstrapState.CREDENTIAL_LOADING)
        if self.credentials.exists_auth():
            self._transition(BootstrapState.CREDENTIAL_FOUND)
        else:
            self._transition(BootstrapState.CREDENTIAL_MISSING)
            self._transition(BootstrapState.WIZARD_RUNNING)
            create_user(self.credentials, self.prompter, self.logger)
            self._transition(BootstrapState.USER_CREATED)
        return self.credentials

    def init_storage(self) -> StorageProvider:
        self._transition(BootstrapState.STORAGE_INIT)
        self.storage = StorageProvider(self.config.root_data_dir, self.config.root_temp_dir)
        self.logger.info(
            "Storage ready",
            data=str(self.storage.root_data_dir),
            temp=str(self.storage.root_temp_dir),
        )
        return self.storage

    def construct_modules(self) -> List[Module]:
        self._transition(BootstrapState.MODULES_CONSTRUCTING)
        self.router = Router(logger=self.logger)
        deps = ModuleDeps(
            router=self.router,
            config=self.config_provider,
            credentials=self.credentials,
            storage=self.storage,
            logger=self.logger,
        )
        self.modules = self.registry.construct_all(deps)
        return self.modules

    def start_modules(self) -> Router:
        self._transition(BootstrapState.MODULES_STARTING)
        self.registry.start_all(self.modules)
        return self.router

    def stages(self) -> List[Callable[[], Any]]:
        """Stage callables in execution order."""
        return [
            self.load_config,
            self.load_credentials,
            self.init_storage,
            self.construct_modules,
            self.start_modules,
        ]

    def run(self) -> BootstrapResult:
        """Run every stage, stopping at the first failure.

        Returns:
            BootstrapResult; on success the state is SERVING
        """
        results: List[StageResult] = []
        for stage in self.stages():
            name = stage.__name__
            with self.logger.add_context(stage=name):
                try:
                    results.append(StageResult.success(name, stage()))
                except SanatoError as e:
                    self.logger.error(f"Startup failed: {e.message}", error_code=e.error_code.name)
                    results.append(StageResult.failure(name, e))
                    self._transition(BootstrapState.FATAL)
                    return BootstrapResult(ok=False, state=self.state, stages=results)

        self._transition(BootstrapState.SERVING)
        return BootstrapResult(ok=True, state=self.state, stages=results)
