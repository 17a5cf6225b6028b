#!/usr/bin/env python3
"""Base classes for Sanato API modules.

This module provides the uniform construction contract every module follows:
- ModuleDeps: the shared router and providers, passed explicitly
- Module: constructed from ModuleDeps, then started to register routes

Construction validates and prepares; it must not touch the router. Only
start() mutates the shared router, so a failed construction of any module
leaves the router untouched.

Example:
    >>> class Echo(Module):
    ...     name = "echo"
    ...     def start(self):
    ...         self.router.get("/echo", self.echo)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sanato.auth.credentials import CredentialStore
from sanato.core.config import Config, ConfigProvider
from sanato.core.logging import Logger
from sanato.http.router import Router
from sanato.storage.provider import StorageProvider


@dataclass(frozen=True)
class ModuleDeps:
    """Dependencies shared by every module."""

    router: Router
    config: ConfigProvider
    credentials: CredentialStore
    storage: StorageProvider
    logger: Logger


class Module(ABC):
    """Abstract base class for API/protocol modules."""

    #: Identifier used in logs and errors
    name: str = "module"

    def __init__(self, deps: ModuleDeps):
        """Initialize module.

        Args:
            deps: Shared router and providers

        Raises:
            Exception: Any failure here aborts startup before any module starts
        """
        self.deps = deps
        self.router = deps.router
        self.credentials = deps.credentials
        self.storage = deps.storage
        self.logger = deps.logger.child(self.name)
        self.started = False

    @property
    def config(self) -> Config:
        return self.deps.config.get()

    @abstractmethod
    def start(self) -> None:
        """Register this module's routes on the shared router."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, started={self.started})"
