"""Sanato API modules and the registry that composes them.

DEFAULT_MODULES lists the modules a server runs, in construction and
start order.
"""

from .auth_api import AuthAPI
from .base import Module, ModuleDeps
from .files_api import FilesAPI
from .registry import ModuleFactory, ModuleRegistry
from .webdav import WebDAVAPI

DEFAULT_MODULES = (AuthAPI, WebDAVAPI, FilesAPI)

__all__ = [
    "AuthAPI",
    "FilesAPI",
    "WebDAVAPI",
    "Module",
    "ModuleDeps",
    "ModuleFactory",
    "ModuleRegistry",
    "DEFAULT_MODULES",
]
