"""
TabDesk Core - Application Infrastructure.

Provides:
- ServiceLocator: Explicit owner of the application's systems
- BaseSystem: Abstract base for all systems
- ConfigManager: Configuration with persistence
- ObserverEvent: Plain-Python pub/sub for non-Qt systems

Usage:
    from tabdesk.core import ServiceLocator, ConfigManager

    locator = ServiceLocator(ConfigManager("config.json"))
    locator.register_system(DocumentManager)
    await locator.start_all()
"""
from .base_system import BaseSystem
from .locator import ServiceLocator
from .config import (
    ConfigManager,
    AppConfig,
    GeneralSettings,
    EditorSettings,
    SessionSettings,
)
from .events import ObserverEvent
from .logging import setup_logging, setup_logging_from_config
