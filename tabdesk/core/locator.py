"""
Service Locator - explicit owner of the application's systems.

Unlike a process-wide singleton, each ServiceLocator is an ordinary
instance: an application creates one and passes it to its UI bindings,
and tests create as many isolated ones as they need.
"""
from typing import Dict, List, Optional, Type, TypeVar
from loguru import logger

from .base_system import BaseSystem
from .config import ConfigManager

T = TypeVar("T", bound=BaseSystem)


class ServiceLocator:
    """
    Registry of BaseSystem instances keyed by their class.

    Usage:
        locator = ServiceLocator(ConfigManager("config.json"))
        locator.register_system(DocumentManager)
        locator.register_system(SessionState)
        await locator.start_all()

        docs = locator.get_system(DocumentManager)
    """

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or ConfigManager(None)
        self._systems: Dict[type, BaseSystem] = {}
        self._order: List[type] = []

    def register_system(self, system_cls: Type[T], instance: Optional[T] = None) -> T:
        """
        Register a system, constructing it with (locator, config) unless an
        instance is supplied. Registration order is startup order.
        """
        if system_cls in self._systems:
            logger.warning(f"System already registered: {system_cls.__name__}")
            return self._systems[system_cls]  # type: ignore[return-value]

        system = instance if instance is not None else system_cls(self, self.config)
        self._systems[system_cls] = system
        self._order.append(system_cls)
        logger.debug(f"Registered system: {system_cls.__name__}")
        return system

    def get_system(self, system_cls: Type[T]) -> T:
        """
        Get a registered system.

        Raises:
            KeyError: If the system was never registered
        """
        try:
            return self._systems[system_cls]  # type: ignore[return-value]
        except KeyError:
            raise KeyError(f"System not registered: {system_cls.__name__}") from None

    def has_system(self, system_cls: type) -> bool:
        return system_cls in self._systems

    def check_dependencies(self) -> None:
        """
        Verify every system's ``depends_on`` was registered before it.

        Raises:
            RuntimeError: Naming the first missing or misordered dependency
        """
        for position, cls in enumerate(self._order):
            for dep in self._systems[cls].depends_on:
                if dep not in self._systems:
                    raise RuntimeError(f"{cls.__name__} depends on unregistered {dep.__name__}")
                if self._order.index(dep) > position:
                    raise RuntimeError(f"{cls.__name__} registered before its dependency {dep.__name__}")

    async def start_all(self) -> None:
        """Initialize all systems in registration order."""
        self.check_dependencies()
        for cls in self._order:
            system = self._systems[cls]
            if not system.is_ready:
                await system.initialize()
        logger.info(f"Started {len(self._order)} systems")

    async def stop_all(self) -> None:
        """Shut down all systems in reverse registration order."""
        for cls in reversed(self._order):
            system = self._systems[cls]
            if system.is_ready:
                await system.shutdown()
        logger.info("All systems stopped")
