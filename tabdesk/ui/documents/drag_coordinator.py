"""
Drag Coordinator

Tab reordering within a pane and tab moves across panes, driven either
directly or through a typed drag session.
"""
from dataclasses import dataclass, replace
from typing import Optional
from loguru import logger

from .models import EditorState
from .pane_set import active_after_removal
from .store import EditorStore


@dataclass(frozen=True)
class DragSession:
    """
    An in-progress tab drag.

    Captured at drag start and handed back on drop, where it is checked
    against the state at that moment before anything moves.
    """
    tab_id: str
    source_pane_id: str
    source_index: int


def reorder_state(state: EditorState, pane_id: str, from_index: int, to_index: int) -> Optional[EditorState]:
    """Pure transition: remove the tab at ``from_index`` and insert it at ``to_index``."""
    pane = state.pane(pane_id)
    if pane is None or from_index == to_index:
        return None
    count = len(pane.tab_ids)
    if not (0 <= from_index < count and 0 <= to_index < count):
        return None
    ids = list(pane.tab_ids)
    moved = ids.pop(from_index)
    ids.insert(to_index, moved)
    return state.with_pane(replace(pane, tab_ids=tuple(ids)))


def move_state(state: EditorState, tab_id: str, from_pane_id: str, to_pane_id: str) -> Optional[EditorState]:
    """Pure transition: move ``tab_id`` to the end of another pane and focus it there."""
    if from_pane_id == to_pane_id:
        return None
    source = state.pane(from_pane_id)
    target = state.pane(to_pane_id)
    if source is None or target is None or not source.contains(tab_id):
        return None

    remaining, active = active_after_removal(source.tab_ids, source.active_tab_id, [tab_id])
    state = state.with_pane(replace(source, tab_ids=remaining, active_tab_id=active))
    state = state.with_pane(
        replace(target, tab_ids=target.tab_ids + (tab_id,), active_tab_id=tab_id)
    )
    return replace(state, active_pane_id=to_pane_id)


class DragCoordinator:
    """
    Validates and applies tab drag & drop.

    Usage:
        session = drags.start_drag(tab_id, pane_id)
        ...
        drags.drop(session, target_pane_id, target_tab_id)
    """

    def __init__(self, store: EditorStore):
        self._store = store
        self._session: Optional[DragSession] = None

    @property
    def current_session(self) -> Optional[DragSession]:
        return self._session

    def start_drag(self, tab_id: str, pane_id: str) -> Optional[DragSession]:
        """Begin dragging ``tab_id`` out of ``pane_id``."""
        pane = self._store.state.pane(pane_id)
        if pane is None or not pane.contains(tab_id):
            logger.debug(f"Drag refused: {tab_id} not in {pane_id}")
            return None
        self._session = DragSession(tab_id, pane_id, pane.index_of(tab_id))
        logger.debug(f"Drag started: {self._session}")
        return self._session

    def end_drag(self) -> None:
        """Forget the current drag (drop completed or cancelled)."""
        self._session = None

    def is_current(self, session: DragSession) -> bool:
        """True if ``session`` still describes where its tab actually is."""
        pane = self._store.state.pane(session.source_pane_id)
        if pane is None:
            return False
        if not (0 <= session.source_index < len(pane.tab_ids)):
            return False
        return pane.tab_ids[session.source_index] == session.tab_id

    def drop(self, session: DragSession, target_pane_id: str, target_tab_id: Optional[str] = None) -> bool:
        """
        Finish a drag.

        Args:
            session: Session returned by start_drag
            target_pane_id: Pane the tab was dropped on
            target_tab_id: Tab it was dropped on, or None for empty tab-bar space

        Returns:
            True if the layout changed
        """
        self.end_drag()
        if not self.is_current(session):
            logger.debug(f"Stale drag rejected: {session}")
            return False

        if target_pane_id != session.source_pane_id:
            return self.move_tab(session.tab_id, session.source_pane_id, target_pane_id)

        if target_tab_id is None:
            return self.reorder_to_end(session.source_pane_id, session.source_index)

        pane = self._store.state.pane(target_pane_id)
        target_index = pane.index_of(target_tab_id)
        if target_index < 0:
            logger.debug(f"Drop target {target_tab_id} not in {target_pane_id}")
            return False
        return self.reorder(target_pane_id, session.source_index, target_index)

    def reorder(self, pane_id: str, from_index: int, to_index: int) -> bool:
        changed = self._store.update(lambda s: reorder_state(s, pane_id, from_index, to_index))
        if changed:
            logger.debug(f"Reordered {pane_id}: {from_index} -> {to_index}")
        return changed

    def reorder_to_end(self, pane_id: str, from_index: int) -> bool:
        """Move the tab at ``from_index`` to the end of its pane."""
        pane = self._store.state.pane(pane_id)
        if pane is None:
            return False
        return self.reorder(pane_id, from_index, len(pane.tab_ids) - 1)

    def move_tab(self, tab_id: str, from_pane_id: str, to_pane_id: str) -> bool:
        changed = self._store.update(lambda s: move_state(s, tab_id, from_pane_id, to_pane_id))
        if changed:
            logger.info(f"Moved tab {tab_id}: {from_pane_id} -> {to_pane_id}")
        else:
            logger.debug(f"Move rejected: {tab_id} {from_pane_id} -> {to_pane_id}")
        return changed
