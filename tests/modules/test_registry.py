"""Tests for module construction and start ordering."""
import pytest

from sanato.core.errors import ModuleInitError, ModuleStartError
from sanato.http.wsgi import Response
from sanato.modules.base import Module
from sanato.modules.registry import ModuleRegistry


def make_module(name, events, fail_on=None):
    """Build a Module class that records its lifecycle in events."""

    class Recorded(Module):
        def __init__(self, deps):
            if fail_on == "init":
                raise RuntimeError(f"{name} cannot initialize")
            super().__init__(deps)
            events.append(("init", name))

        def start(self):
            if fail_on == "start":
                raise RuntimeError(f"{name} cannot start")
            self.router.get(f"/{name}", lambda request, params: Response(name.encode()))
            events.append(("start", name))

    Recorded.name = name
    return Recorded


class TestConstructAll:
    """Test the construction phase."""

    def test_order(self, deps, logger):
        events = []
        registry = ModuleRegistry(
            [make_module("a", events), make_module("b", events), make_module("c", events)],
            logger=logger,
        )
        modules = registry.construct_all(deps)

        assert [m.name for m in modules] == ["a", "b", "c"]
        assert events == [("init", "a"), ("init", "b"), ("init", "c")]
        assert not any(m.started for m in modules)

    def test_failure_names_module_and_starts_nothing(self, deps, logger):
        events = []
        registry = ModuleRegistry(
            [
                make_module("a", events),
                make_module("b", events, fail_on="init"),
                make_module("c", events),
            ],
            logger=logger,
        )

        with pytest.raises(ModuleInitError) as exc_info:
            registry.construct_all(deps)

        assert exc_info.value.module == "b"
        assert "b cannot initialize" in str(exc_info.value)
        assert events == [("init", "a")]
        assert deps.router.routes() == []

    def test_modules_share_deps(self, deps, logger):
        events = []
        registry = ModuleRegistry([make_module("a", events), make_module("b", events)], logger=logger)
        first, second = registry.construct_all(deps)

        assert first.router is second.router is deps.router
        assert first.storage is second.storage is deps.storage
        assert first.config is second.config

    def test_module_logger_is_child(self, deps, logger):
        (module,) = ModuleRegistry([make_module("files", [])], logger=logger).construct_all(deps)
        assert module.logger.name == "sanato.test.files"

    def test_plain_callable_factory(self, deps, logger):
        events = []
        cls = make_module("a", events)
        registry = ModuleRegistry([lambda d: cls(d)], logger=logger)
        assert len(registry.construct_all(deps)) == 1


class TestStartAll:
    """Test the start phase."""

    def test_starts_in_order(self, deps, logger, recorder):
        events = []
        registry = ModuleRegistry([make_module("a", events), make_module("b", events)], logger=logger)
        modules = registry.construct_all(deps)
        registry.start_all(modules)

        assert events[2:] == [("start", "a"), ("start", "b")]
        assert all(m.started for m in modules)
        assert "Module started: b" in recorder.messages

    def test_start_failure_is_fatal(self, deps, logger):
        events = []
        registry = ModuleRegistry(
            [
                make_module("a", events),
                make_module("b", events, fail_on="start"),
                make_module("c", events),
            ],
            logger=logger,
        )
        modules = registry.construct_all(deps)

        with pytest.raises(ModuleStartError) as exc_info:
            registry.start_all(modules)

        assert exc_info.value.module == "b"
        assert [m.started for m in modules] == [True, False, False]
        assert ("start", "c") not in events

    def test_route_conflict_fails_start(self, deps, logger):
        events = []
        registry = ModuleRegistry([make_module("a", events), make_module("a", events)], logger=logger)
        modules = registry.construct_all(deps)

        with pytest.raises(ModuleStartError) as exc_info:
            registry.start_all(modules)
        assert "already registered" in str(exc_info.value)

    def test_register_appends(self, logger):
        registry = ModuleRegistry(logger=logger)
        factory = make_module("a", [])
        registry.register(factory)
        assert registry.factories == [factory]
