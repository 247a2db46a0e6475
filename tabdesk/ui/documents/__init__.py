"""
Document tab system.

Provides:
- DocumentManager: Open tabs, panes and active state
- EditorStore: Atomic holder of the EditorState snapshot
- SplitManager: Creates and merges the second pane
- DragCoordinator: Tab reorder and cross-pane moves
- ClosureCoordinator: Unsaved-changes confirmation
- PersistenceAdapter: Path-only layout snapshots
"""
from tabdesk.ui.documents.models import (
    DEFAULT_PANE_ID,
    MAX_PANES,
    CursorPosition,
    DocumentDescriptor,
    EditorState,
    Pane,
    SplitDirection,
    Tab,
    ViewMode,
)
from tabdesk.ui.documents.errors import (
    TabDeskError,
    DocumentLoadError,
    DocumentSaveError,
    CloseAbortedError,
    LayoutFormatError,
)
from tabdesk.ui.documents.document_io import DocumentIO, FileSystemDocumentIO
from tabdesk.ui.documents.store import EditorStore
from tabdesk.ui.documents.pane_set import PaneSet
from tabdesk.ui.documents.split_manager import SplitManager
from tabdesk.ui.documents.drag_coordinator import DragCoordinator, DragSession
from tabdesk.ui.documents.tab_registry import TabRegistry
from tabdesk.ui.documents.closure import ClosureCoordinator, ClosureState, CloseDecision, PendingClose
from tabdesk.ui.documents.persistence import PersistedLayout, PersistedPane, PersistenceAdapter
from tabdesk.ui.documents.document_manager import DocumentManager

__all__ = [
    'DEFAULT_PANE_ID',
    'MAX_PANES',
    'CursorPosition',
    'DocumentDescriptor',
    'EditorState',
    'Pane',
    'SplitDirection',
    'Tab',
    'ViewMode',
    'TabDeskError',
    'DocumentLoadError',
    'DocumentSaveError',
    'CloseAbortedError',
    'LayoutFormatError',
    'DocumentIO',
    'FileSystemDocumentIO',
    'EditorStore',
    'PaneSet',
    'SplitManager',
    'DragCoordinator',
    'DragSession',
    'TabRegistry',
    'ClosureCoordinator',
    'ClosureState',
    'CloseDecision',
    'PendingClose',
    'PersistedLayout',
    'PersistedPane',
    'PersistenceAdapter',
    'DocumentManager',
]
