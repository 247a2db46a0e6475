"""
Document Manager - open tabs, split panes and active state.

The one controller instance UI bindings talk to. It owns the EditorStore
and wires the tab, pane, split, drag, closure and persistence components
around it; views call its commands and listen to its signals.
"""
import asyncio
from typing import List, Optional, Sequence, Union
from PySide6.QtCore import QObject, Signal
from loguru import logger

from tabdesk.core.base_system import BaseSystem
from tabdesk.ui.documents.closure import ClosureCoordinator, ClosureState, CloseDecision, PendingClose
from tabdesk.ui.documents.document_io import DocumentIO, FileSystemDocumentIO
from tabdesk.ui.documents.drag_coordinator import DragCoordinator, DragSession
from tabdesk.ui.documents.errors import DocumentSaveError
from tabdesk.ui.documents.models import DocumentDescriptor, EditorState, Pane, SplitDirection, Tab, ViewMode
from tabdesk.ui.documents.pane_set import PaneSet
from tabdesk.ui.documents.split_manager import SplitManager
from tabdesk.ui.documents.store import EditorStore
from tabdesk.ui.documents.tab_registry import TabRegistry
from tabdesk.ui.documents.persistence import LiveDocuments, PersistedLayout, PersistenceAdapter


class _DocumentSignals(QObject):
    """Signal holder to avoid metaclass conflict."""
    tab_opened = Signal(str)  # tab_id
    tab_closed = Signal(str)  # tab_id
    active_changed = Signal(object)  # active tab id of the active pane, or None


class DocumentManager(BaseSystem):
    """
    Manages open document tabs across one or two panes.

    Responsibilities:
    - Open documents once per path and focus existing tabs
    - Track dirty state and save through the DocumentIO collaborator
    - Split, merge, reorder and move tabs between panes
    - Ask before closing unsaved tabs
    - Serialize and restore the layout

    Usage:
        docs = locator.get_system(DocumentManager)

        await docs.open_file(DocumentDescriptor("/notes/todo.md"))
        docs.update_tab_content("/notes/todo.md", "edited")

        pending = docs.close_tab("/notes/todo.md")
        if pending:
            await docs.resolve_close(CloseDecision.SAVE)

        # Listen for changes via signals
        docs.signals.active_changed.connect(on_active_changed)
        docs.store.signals.state_changed.connect(view.render)
    """

    def __init__(self, locator, config, io: Optional[DocumentIO] = None):
        """Initialize DocumentManager."""
        super().__init__(locator, config)

        # Qt signals via composition
        self._signals = _DocumentSignals()

        editor = config.data.editor
        self._store = EditorStore()
        self._panes = PaneSet(self._store)
        self._registry = TabRegistry(
            self._store,
            self._panes,
            io or FileSystemDocumentIO(),
            default_view_mode=editor.default_view_mode,
            load_error_template=editor.load_error_template,
        )
        self._splits = SplitManager(self._store)
        self._drags = DragCoordinator(self._store)
        self._closer = ClosureCoordinator(
            self._panes, self._registry, after_removal=self._collapse_if_configured
        )
        self._persistence = PersistenceAdapter(
            self._registry, default_split_direction=editor.default_split_direction
        )

        self._last_state = self._store.state
        self._store.signals.state_changed.connect(self._on_state_changed)

    @property
    def signals(self) -> _DocumentSignals:
        """Get Qt signals object for UI binding."""
        return self._signals

    @property
    def store(self) -> EditorStore:
        return self._store

    @property
    def registry(self) -> TabRegistry:
        return self._registry

    @property
    def closer(self) -> ClosureCoordinator:
        return self._closer

    @property
    def state(self) -> EditorState:
        return self._store.state

    async def initialize(self):
        """Initialize the DocumentManager."""
        await super().initialize()
        logger.info("DocumentManager initialized")

    async def shutdown(self):
        """Shutdown; unsaved content is the UI's concern before this point."""
        unsaved = [t.id for t in self._store.state.tabs.values() if t.is_dirty]
        if unsaved:
            logger.warning(f"Shutting down with {len(unsaved)} unsaved tab(s)")
        await super().shutdown()

    # === Opening ===

    async def open_file(self, doc: DocumentDescriptor) -> Optional[Tab]:
        """Open ``doc`` in the active pane, or focus its existing tab."""
        return await self._registry.open(doc)

    async def open_file_in_pane(self, doc: DocumentDescriptor, pane_id: str) -> Optional[Tab]:
        """Open ``doc`` in a specific pane (e.g. a file dropped onto it)."""
        return await self._registry.open(doc, pane_id)

    async def open_file_in_other_pane(self, doc: DocumentDescriptor) -> Optional[Tab]:
        """Open ``doc`` beside the active pane, splitting first if needed."""
        state = self._store.state
        other = next((p for p in state.panes if p.id != state.active_pane_id), None)
        pane_id = other.id if other else self.split_pane(self.config.data.editor.default_split_direction)
        return await self._registry.open(doc, pane_id)

    # === Closing ===

    def close_tab(self, tab_id: str, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        return self._closer.close(tab_id, pane_id)

    def close_other_tabs(self, tab_id: str, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        return self._closer.close_others(tab_id, pane_id)

    def close_all_tabs(self, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        return self._closer.close_all(pane_id)

    def close_saved_tabs(self, pane_id: Optional[str] = None) -> List[str]:
        return self._closer.close_saved(pane_id)

    def close_active_tab(self, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        return self._closer.close_active(pane_id)

    async def resolve_close(self, decision: Union[CloseDecision, str]) -> List[str]:
        """Answer the pending unsaved-changes prompt. See ClosureCoordinator.resolve."""
        return await self._closer.resolve(decision)

    @property
    def pending_close(self) -> Optional[PendingClose]:
        return self._closer.pending

    @property
    def closure_state(self) -> ClosureState:
        return self._closer.state

    # === Tabs ===

    def set_active_tab(self, tab_id: str, pane_id: Optional[str] = None) -> bool:
        return self._panes.set_active_tab(tab_id, pane_id)

    def update_tab_content(self, tab_id: str, content: str) -> bool:
        return self._registry.update_content(tab_id, content)

    async def save_tab(self, tab_id: str) -> bool:
        """Save one tab. Raises DocumentSaveError on write failure."""
        return await self._registry.save(tab_id)

    async def save_all(self) -> List[DocumentSaveError]:
        """
        Save every dirty tab.

        Returns:
            The failures; an empty list means everything was written
        """
        dirty = [t.id for t in self._store.state.tabs.values() if t.is_dirty]
        results = await asyncio.gather(
            *(self._registry.save(tid) for tid in dirty), return_exceptions=True
        )
        failures = []
        for result in results:
            if isinstance(result, DocumentSaveError):
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
        return failures

    def reorder_tabs(self, pane_id: str, from_index: int, to_index: int) -> bool:
        return self._drags.reorder(pane_id, from_index, to_index)

    def reorder_tab_to_end(self, pane_id: str, from_index: int) -> bool:
        return self._drags.reorder_to_end(pane_id, from_index)

    def set_tab_view_mode(self, tab_id: str, view_mode: Union[ViewMode, str]) -> bool:
        return self._registry.set_view_mode(tab_id, view_mode)

    def set_cursor_position(self, tab_id: str, line: int, column: int) -> bool:
        return self._registry.set_cursor_position(tab_id, line, column)

    def next_tab(self, pane_id: Optional[str] = None) -> bool:
        return self._panes.next_tab(pane_id)

    def previous_tab(self, pane_id: Optional[str] = None) -> bool:
        return self._panes.previous_tab(pane_id)

    # === Panes ===

    def split_pane(self, direction: Union[SplitDirection, str], tab_id: Optional[str] = None) -> Optional[str]:
        """Split and return the new pane id (None if already split)."""
        return self._splits.split(direction, tab_id)

    def unsplit(self) -> bool:
        return self._splits.unsplit()

    def set_active_pane(self, pane_id: str) -> bool:
        return self._panes.set_active_pane(pane_id)

    def resize_panes(self, sizes: Sequence[float]) -> bool:
        return self._panes.resize_panes(sizes)

    def move_tab_to_pane(self, tab_id: str, from_pane_id: str, to_pane_id: str) -> bool:
        moved = self._drags.move_tab(tab_id, from_pane_id, to_pane_id)
        if moved:
            self._collapse_if_configured()
        return moved

    # === Drag & drop ===

    def start_drag(self, tab_id: str, pane_id: str) -> Optional[DragSession]:
        return self._drags.start_drag(tab_id, pane_id)

    def drop_drag(self, session: DragSession, target_pane_id: str, target_tab_id: Optional[str] = None) -> bool:
        changed = self._drags.drop(session, target_pane_id, target_tab_id)
        if changed and target_pane_id != session.source_pane_id:
            self._collapse_if_configured()
        return changed

    def end_drag(self) -> None:
        self._drags.end_drag()

    # === Queries ===

    def get_tab(self, tab_id: str) -> Optional[Tab]:
        return self._registry.get(tab_id)

    def get_active_tab(self, pane_id: Optional[str] = None) -> Optional[Tab]:
        return self._panes.get_active_tab(pane_id)

    def get_active_pane(self) -> Optional[Pane]:
        return self._panes.get_active_pane()

    def get_unsaved_tabs(self, pane_id: Optional[str] = None) -> List[Tab]:
        return self._panes.get_unsaved_tabs(pane_id)

    # === Persistence ===

    def get_persisted_state(self) -> PersistedLayout:
        """Path-only snapshot of the layout; ``.to_dict()`` for JSON."""
        return self._persistence.serialize(self._store.state)

    async def restore_state(self, layout: Union[PersistedLayout, dict], live_documents: LiveDocuments) -> EditorState:
        """
        Replace the current layout with a persisted one.

        Raises:
            LayoutFormatError: If ``layout`` is a malformed dict
        """
        state = await self._persistence.restore(layout, live_documents)
        self._drags.end_drag()
        self._store.set(state)
        return state

    # === Internals ===

    def _collapse_if_configured(self) -> None:
        if self.config.data.editor.auto_unsplit_empty_pane:
            self._splits.collapse_empty_pane()

    def _on_state_changed(self, new_state: EditorState) -> None:
        old_state = self._last_state
        self._last_state = new_state

        for tab_id in new_state.tabs.keys() - old_state.tabs.keys():
            self._signals.tab_opened.emit(tab_id)
        for tab_id in old_state.tabs.keys() - new_state.tabs.keys():
            logger.debug(f"Tab closed: {tab_id}")
            self._signals.tab_closed.emit(tab_id)

        old_active = old_state.active_pane.active_tab_id if old_state.active_pane else None
        new_active = new_state.active_pane.active_tab_id if new_state.active_pane else None
        if old_active != new_active:
            self._signals.active_changed.emit(new_active)
