#!/usr/bin/env python3
"""Module registry for Sanato.

Constructs every configured module against one ModuleDeps bundle and then
starts them, both in the order the factories were registered.

The two phases never interleave: if any construction fails, nothing is
started and ModuleInitError names the failing module. A failure in start()
is fatal too and raises ModuleStartError.

Example:
    >>> registry = ModuleRegistry([AuthAPI, WebDAVAPI, FilesAPI])
    >>> modules = registry.construct_all(deps)
    >>> registry.start_all(modules)
"""

from typing import Callable, List, Optional, Sequence

from sanato.core.errors import ModuleInitError, ModuleStartError, SanatoError
from sanato.core.logging import Logger, get_logger
from sanato.modules.base import Module, ModuleDeps

ModuleFactory = Callable[[ModuleDeps], Module]


def _factory_name(factory: ModuleFactory) -> str:
    return getattr(factory, "name", None) or getattr(factory, "__name__", repr(factory))


class ModuleRegistry:
    """Ordered set of module factories."""

    def __init__(self, factories: Optional[Sequence[ModuleFactory]] = None, logger: Optional[Logger] = None):
        """Initialize module registry.

        Args:
            factories: Module classes or callables taking ModuleDeps
            logger: Logger instance
        """
        self._factories: List[ModuleFactory] = list(factories or [])
        self.logger = logger or get_logger()

    def register(self, factory: ModuleFactory) -> None:
        """Append a module factory; it is constructed and started last."""
        self._factories.append(factory)

    @property
    def factories(self) -> List[ModuleFactory]:
        return list(self._factories)

    def construct_all(self, deps: ModuleDeps) -> List[Module]:
        """Construct every module.

        Args:
            deps: Shared dependencies

        Returns:
            Constructed, not yet started, modules in registration order

        Raises:
            ModuleInitError: On the first construction failure
        """
        modules = []
        for factory in self._factories:
            name = _factory_name(factory)
            self.logger.debug(f"Constructing module: {name}")
            try:
                modules.append(factory(deps))
            except SanatoError as e:
                raise ModuleInitError(f"Module {name} failed to initialize: {e.message}", module=name)
            except Exception as e:
                raise ModuleInitError(f"Module {name} failed to initialize: {e}", module=name)
        return modules

    def start_all(self, modules: Sequence[Module]) -> None:
        """Start modules in order.

        Raises:
            ModuleStartError: On the first start failure; later modules are
                not started
        """
        for module in modules:
            self.logger.debug(f"Starting module: {module.name}")
            try:
                module.start()
            except SanatoError as e:
                raise ModuleStartError(f"Module {module.name} failed to start: {e.message}", module=module.name)
            except Exception as e:
                raise ModuleStartError(f"Module {module.name} failed to start: {e}", module=module.name)
            module.started = True
            self.logger.info(f"Module started: {module.name}")
