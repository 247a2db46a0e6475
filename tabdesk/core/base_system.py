from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Tuple, Type, TypeVar
from loguru import logger

if TYPE_CHECKING:
    from .locator import ServiceLocator
    from .config import ConfigManager

S = TypeVar("S", bound="BaseSystem")


class BaseSystem(ABC):
    """
    Abstract Base Class for long-lived systems (DocumentManager, SessionState).

    A system is built with the locator that owns it and the shared config.
    Systems it talks to are listed in ``depends_on``; the locator refuses to
    start a system whose dependencies are not registered ahead of it, so
    startup and shutdown order follow the dependency order.

        class SessionState(BaseSystem):
            depends_on = (DocumentManager,)

            def save(self):
                layout = self.require(DocumentManager).get_persisted_state()
    """
    depends_on: Tuple[Type["BaseSystem"], ...] = ()

    def __init__(self, locator: 'ServiceLocator', config: 'ConfigManager'):
        self.locator = locator
        self.config = config
        self._is_ready = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def initialize(self):
        """
        Async startup (e.g. loading a saved session).
        Called by ServiceLocator.start_all; subclasses call super() first.
        """
        self._is_ready = True
        logger.debug(f"{self.name} ready")

    @abstractmethod
    async def shutdown(self):
        """
        Cleanup (e.g. flushing session state).
        Subclasses call super() last.
        """
        self._is_ready = False
        logger.debug(f"{self.name} stopped")

    @property
    def is_ready(self) -> bool:
        return self._is_ready

    def require(self, system_cls: Type[S]) -> S:
        """
        Fetch a system this one depends on.

        Raises:
            KeyError: If it was never registered with the locator
        """
        return self.locator.get_system(system_cls)

    async def __aenter__(self):
        """Async context manager entry: Initialize system."""
        if not self._is_ready:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit: Shutdown system."""
        if self._is_ready:
            await self.shutdown()
