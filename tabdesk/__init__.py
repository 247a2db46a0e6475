"""
TabDesk - multi-pane document tab core for desktop editors.

Keeps the open tabs, one or two panes and their active state as immutable
snapshots, loads and saves documents asynchronously, and persists the
layout between runs. Views bind to Qt signals; nothing here draws.
"""

__version__ = "0.1.0"

# Core systems
from tabdesk.core.base_system import BaseSystem
from tabdesk.core.locator import ServiceLocator
from tabdesk.core.config import ConfigManager, AppConfig, GeneralSettings, EditorSettings, SessionSettings
from tabdesk.core.events import ObserverEvent
from tabdesk.core.logging import setup_logging, setup_logging_from_config

# Documents
from tabdesk.ui.documents import (
    DocumentManager,
    DocumentDescriptor,
    Tab,
    Pane,
    EditorState,
    ViewMode,
    SplitDirection,
    CloseDecision,
    PendingClose,
    DragSession,
    PersistedLayout,
    DocumentIO,
    FileSystemDocumentIO,
    TabDeskError,
    DocumentLoadError,
    DocumentSaveError,
    CloseAbortedError,
    LayoutFormatError,
)
from tabdesk.ui.state import SessionState

__all__ = [
    "BaseSystem",
    "ServiceLocator",
    "ConfigManager",
    "AppConfig",
    "GeneralSettings",
    "EditorSettings",
    "SessionSettings",
    "ObserverEvent",
    "setup_logging",
    "setup_logging_from_config",
    "DocumentManager",
    "DocumentDescriptor",
    "Tab",
    "Pane",
    "EditorState",
    "ViewMode",
    "SplitDirection",
    "CloseDecision",
    "PendingClose",
    "DragSession",
    "PersistedLayout",
    "DocumentIO",
    "FileSystemDocumentIO",
    "TabDeskError",
    "DocumentLoadError",
    "DocumentSaveError",
    "CloseAbortedError",
    "LayoutFormatError",
    "SessionState",
]
