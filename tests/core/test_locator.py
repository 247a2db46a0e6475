import pytest
from unittest.mock import MagicMock

from tabdesk.core.base_system import BaseSystem
from tabdesk.core.config import ConfigManager
from tabdesk.core.locator import ServiceLocator


class RecordingSystem(BaseSystem):
    def __init__(self, locator, config, log=None):
        super().__init__(locator, config)
        self.log = log if log is not None else []

    async def initialize(self):
        self.log.append(("start", type(self).__name__))
        await super().initialize()

    async def shutdown(self):
        self.log.append(("stop", type(self).__name__))
        await super().shutdown()


class FirstSystem(RecordingSystem):
    pass


class SecondSystem(RecordingSystem):
    pass


def test_register_constructs_with_locator_and_config():
    locator = ServiceLocator()
    system = locator.register_system(FirstSystem)

    assert system.locator is locator
    assert system.config is locator.config
    assert locator.get_system(FirstSystem) is system
    assert locator.has_system(FirstSystem)


def test_default_config_is_in_memory():
    assert ServiceLocator().config.filepath is None


def test_duplicate_registration_returns_existing():
    locator = ServiceLocator(ConfigManager(None))
    first = locator.register_system(FirstSystem)
    assert locator.register_system(FirstSystem) is first


def test_get_unregistered_system():
    with pytest.raises(KeyError, match="SecondSystem"):
        ServiceLocator().get_system(SecondSystem)


def test_locators_are_independent():
    one, two = ServiceLocator(), ServiceLocator()
    one.register_system(FirstSystem)
    assert not two.has_system(FirstSystem)


@pytest.mark.asyncio
async def test_start_and_stop_order():
    locator = ServiceLocator()
    log = []
    locator.register_system(FirstSystem, FirstSystem(locator, locator.config, log))
    locator.register_system(SecondSystem, SecondSystem(locator, locator.config, log))

    await locator.start_all()
    await locator.stop_all()

    assert log == [
        ("start", "FirstSystem"),
        ("start", "SecondSystem"),
        ("stop", "SecondSystem"),
        ("stop", "FirstSystem"),
    ]


@pytest.mark.asyncio
async def test_async_context_manager():
    service = FirstSystem(MagicMock(), MagicMock())

    # Verify not ready initially
    assert not service.is_ready

    async with service as s:
        assert s is service
        assert service.is_ready

    assert not service.is_ready


class DependentSystem(RecordingSystem):
    depends_on = (FirstSystem,)


@pytest.mark.asyncio
async def test_start_requires_registered_dependency():
    locator = ServiceLocator()
    locator.register_system(DependentSystem)

    with pytest.raises(RuntimeError, match="unregistered FirstSystem"):
        await locator.start_all()
    assert not locator.get_system(DependentSystem).is_ready


@pytest.mark.asyncio
async def test_start_rejects_dependency_registered_later():
    locator = ServiceLocator()
    locator.register_system(DependentSystem)
    locator.register_system(FirstSystem)

    with pytest.raises(RuntimeError, match="before its dependency"):
        await locator.start_all()


def test_require_fetches_dependency():
    locator = ServiceLocator()
    first = locator.register_system(FirstSystem)
    dependent = locator.register_system(DependentSystem)

    assert dependent.require(FirstSystem) is first
    assert dependent.name == "DependentSystem"
