"""
Tab Registry - canonical per-document tab records.

Owns loading, editing, dirty tracking and saving of tabs. Document I/O is
the only place the core suspends; every completion re-reads the current
snapshot before applying anything, so a tab or pane that disappeared while
the read/write was in flight is never resurrected.
"""
import asyncio
from dataclasses import replace
from typing import Dict, Optional, Union
from PySide6.QtCore import QObject, Signal
from loguru import logger

from .document_io import DocumentIO
from .errors import DocumentLoadError, DocumentSaveError
from .models import CursorPosition, DocumentDescriptor, EditorState, Tab, ViewMode
from .pane_set import PaneSet
from .store import EditorStore

DEFAULT_LOAD_ERROR_TEMPLATE = "Failed to load file: {error}"


class _RegistrySignals(QObject):
    """Signal holder to avoid metaclass conflict."""
    load_failed = Signal(str, str)  # path, message
    save_failed = Signal(str, str)  # path, message
    tab_saved = Signal(str)  # tab_id


class TabRegistry:
    """
    Opens, edits and saves tabs.

    Usage:
        registry = TabRegistry(store, panes, FileSystemDocumentIO())
        tab = await registry.open(DocumentDescriptor("/notes/todo.md"))
        registry.update_content(tab.id, "- [x] done")
        await registry.save(tab.id)
    """

    def __init__(
        self,
        store: EditorStore,
        panes: PaneSet,
        io: DocumentIO,
        default_view_mode: Union[ViewMode, str] = ViewMode.SPLIT,
        load_error_template: str = DEFAULT_LOAD_ERROR_TEMPLATE,
    ):
        self._store = store
        self._panes = panes
        self._io = io
        self._signals = _RegistrySignals()
        self.default_view_mode = ViewMode(default_view_mode)
        self.load_error_template = load_error_template
        # path -> in-flight open; a second open of the same path joins it
        self._pending_loads: Dict[str, asyncio.Task] = {}

    @property
    def signals(self) -> _RegistrySignals:
        """Get Qt signals object for UI binding."""
        return self._signals

    @property
    def io(self) -> DocumentIO:
        return self._io

    def get(self, tab_id: str) -> Optional[Tab]:
        return self._store.state.tabs.get(tab_id)

    def is_loading(self, path: str) -> bool:
        return path in self._pending_loads

    # === Opening ===

    async def open(self, doc: DocumentDescriptor, pane_id: Optional[str] = None) -> Optional[Tab]:
        """
        Open ``doc`` or focus its existing tab.

        Args:
            doc: Document to open
            pane_id: Pane to open into (defaults to the active pane at call time)

        Returns:
            The tab, or None if the target pane vanished before the load finished
        """
        path = doc.path
        if self._panes.focus_tab(path):
            logger.debug(f"Focused existing tab: {path}")
            return self.get(path)

        pending = self._pending_loads.get(path)
        if pending is not None:
            logger.debug(f"Joining in-flight load: {path}")
            await asyncio.shield(pending)
            self._panes.focus_tab(path)
            return self.get(path)

        target = pane_id or self._store.state.active_pane_id
        target_pane = self._store.state.pane(target)
        if target_pane is None:
            logger.debug(f"open ignored, unknown pane {target}")
            return None

        task = asyncio.ensure_future(self._load_and_insert(doc, target, target_pane.instance_id))
        self._pending_loads[path] = task
        return await asyncio.shield(task)

    async def read(self, path: str) -> str:
        """
        Read a document through the I/O collaborator.

        Raises:
            DocumentLoadError: If the read failed
        """
        try:
            return await self._io.read_document(path)
        except OSError as e:
            raise DocumentLoadError(path, e) from e

    async def _load_and_insert(self, doc: DocumentDescriptor, target: str, pane_token: str) -> Optional[Tab]:
        path = doc.path
        load_error: Optional[str] = None
        try:
            content = await self.read(path)
        except DocumentLoadError as e:
            logger.warning(str(e))
            load_error = str(e.cause)
            content = self.load_error_template.format(error=e.cause)
            self._signals.load_failed.emit(path, load_error)
        finally:
            self._pending_loads.pop(path, None)

        tab = Tab(
            document=doc,
            content=content,
            original_content=content,
            view_mode=self.default_view_mode,
            load_error=load_error,
        )

        def transition(state: EditorState):
            pane = state.pane(target)
            # Same id but a different pane: the one we targeted was merged away
            if path in state.tabs or pane is None or pane.instance_id != pane_token:
                return None
            state = state.with_tab(tab).with_pane(
                replace(pane, tab_ids=pane.tab_ids + (path,), active_tab_id=path)
            )
            return replace(state, active_pane_id=target)

        if self._store.update(transition):
            logger.info(f"Opened tab {path} in {target}")
            return tab

        # Pane went away, or the path was opened by another route meanwhile
        if path in self._store.state.tabs:
            self._panes.focus_tab(path)
            return self.get(path)
        logger.debug(f"Dropped load completion for {path}: pane {target} was removed or replaced")
        return None

    # === Editing ===

    def update_content(self, tab_id: str, content: str) -> bool:
        """Replace a tab's content; dirtiness follows by value comparison."""
        def transition(state: EditorState):
            tab = state.tabs.get(tab_id)
            if tab is None or tab.content == content:
                return None
            return state.with_tab(replace(tab, content=content))

        return self._store.update(transition)

    def set_view_mode(self, tab_id: str, view_mode: Union[ViewMode, str]) -> bool:
        mode = ViewMode(view_mode)

        def transition(state: EditorState):
            tab = state.tabs.get(tab_id)
            if tab is None or tab.view_mode == mode:
                return None
            return state.with_tab(replace(tab, view_mode=mode))

        return self._store.update(transition)

    def set_cursor_position(self, tab_id: str, line: int, column: int) -> bool:
        position = CursorPosition(line, column)

        def transition(state: EditorState):
            tab = state.tabs.get(tab_id)
            if tab is None or tab.cursor_position == position:
                return None
            return state.with_tab(replace(tab, cursor_position=position))

        return self._store.update(transition)

    # === Saving ===

    async def save(self, tab_id: str) -> bool:
        """
        Write a dirty tab through the I/O collaborator.

        Returns:
            True if a write happened, False for unknown or clean tabs

        Raises:
            DocumentSaveError: If the write failed; the tab stays dirty
        """
        tab = self.get(tab_id)
        if tab is None or not tab.is_dirty:
            return False

        written = tab.content
        try:
            await self._io.write_document(tab.path, written)
        except OSError as e:
            error = DocumentSaveError(tab.path, e)
            logger.error(str(error))
            self._signals.save_failed.emit(tab.path, str(e))
            raise error from e

        def transition(state: EditorState):
            current = state.tabs.get(tab_id)
            if current is None:
                return None
            # Edits made during the write stay dirty against what was written
            return state.with_tab(replace(current, original_content=written))

        if self._store.update(transition):
            logger.info(f"Saved {tab.path}")
        else:
            logger.debug(f"Save of {tab.path} completed after its tab closed")
        self._signals.tab_saved.emit(tab_id)
        return True
