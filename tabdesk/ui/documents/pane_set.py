"""
PaneSet - the ordered panes, their tab lists and active pointers.

Every method reads the store's snapshot, derives a successor with
functional updates and swaps it in. Invalid requests (unknown panes,
tabs not owned by the pane, mismatched resize) leave the state alone.
"""
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from loguru import logger

from .models import EditorState, Pane, Tab
from .store import EditorStore

# (tab_ids, active_tab_id, removed) -> (remaining, new active)
ActiveSelector = Callable[
    [Sequence[str], Optional[str], Iterable[str]], Tuple[Tuple[str, ...], Optional[str]]
]


def active_after_removal(
    tab_ids: Sequence[str], active_tab_id: Optional[str], removed: Iterable[str]
) -> Tuple[Tuple[str, ...], Optional[str]]:
    """
    Compute a pane's remaining tabs and active tab after removing some ids.

    If the active tab survives it stays active. Otherwise the tab now at the
    removed active tab's old index takes over, or the new last tab, or None
    when nothing remains.
    Tab moves use it, and so does close_all for tabs added after the request.
    """
    doomed = set(removed)
    remaining = tuple(tid for tid in tab_ids if tid not in doomed)
    if not remaining:
        return remaining, None
    if active_tab_id is None:
        return remaining, None
    if active_tab_id in remaining:
        return remaining, active_tab_id
    if active_tab_id not in tab_ids:
        return remaining, remaining[0]

    # Survivors before the old active slot shift left by the removed ones
    old_index = list(tab_ids).index(active_tab_id)
    new_index = sum(1 for tid in tab_ids[:old_index] if tid not in doomed)
    return remaining, remaining[min(new_index, len(remaining) - 1)]


def active_after_close(
    tab_ids: Sequence[str], active_tab_id: Optional[str], removed: Iterable[str]
) -> Tuple[Tuple[str, ...], Optional[str]]:
    """
    Active tab rule for closing tabs by hand.

    The tab now sitting at the first closed tab's original index becomes
    active, or the new last tab, or None when the pane is empty. This holds
    when a background tab is closed too: closing ``a`` in ``[a, b, c]``
    activates ``b`` even if ``c`` was active.
    """
    doomed = set(removed)
    remaining = tuple(tid for tid in tab_ids if tid not in doomed)
    if not remaining:
        return remaining, None
    if len(remaining) == len(tab_ids):
        return remaining, active_tab_id
    closed_at = min(i for i, tid in enumerate(tab_ids) if tid in doomed)
    return remaining, remaining[min(closed_at, len(remaining) - 1)]


def active_or_first(
    tab_ids: Sequence[str], active_tab_id: Optional[str], removed: Iterable[str]
) -> Tuple[Tuple[str, ...], Optional[str]]:
    """Keep a surviving active tab, else activate the first remaining one."""
    doomed = set(removed)
    remaining = tuple(tid for tid in tab_ids if tid not in doomed)
    if active_tab_id in remaining:
        return remaining, active_tab_id
    return remaining, remaining[0] if remaining else None


def activate_kept(keep_tab_id: Optional[str]) -> ActiveSelector:
    """Rule that activates ``keep_tab_id`` if it survives, else the neighbor rule."""
    def select(tab_ids, active_tab_id, removed):
        remaining, active = active_after_removal(tab_ids, active_tab_id, removed)
        if keep_tab_id in remaining:
            return remaining, keep_tab_id
        return remaining, active
    return select


def remove_from_state(
    state: EditorState,
    pane_id: str,
    tab_ids: Iterable[str],
    select: ActiveSelector = active_after_removal,
) -> EditorState:
    """Pure transition: drop ``tab_ids`` from ``pane_id`` and from the tab map."""
    pane = state.pane(pane_id)
    if pane is None:
        return state
    doomed = [tid for tid in tab_ids if pane.contains(tid)]
    if not doomed:
        return state
    remaining, active = select(pane.tab_ids, pane.active_tab_id, doomed)
    return state.with_pane(replace(pane, tab_ids=remaining, active_tab_id=active)).without_tabs(doomed)


class PaneSet:
    """
    Pane-level commands and queries over an EditorStore.

    Usage:
        panes = PaneSet(store)
        panes.set_active_tab("/notes/todo.md")
        panes.next_tab()
        panes.resize_panes([30, 70])
    """

    def __init__(self, store: EditorStore):
        self._store = store

    @property
    def state(self) -> EditorState:
        return self._store.state

    def resolve_pane_id(self, pane_id: Optional[str] = None) -> str:
        """Explicit pane id, or the active pane's."""
        return pane_id or self._store.state.active_pane_id

    # === Queries ===

    def get_active_pane(self) -> Optional[Pane]:
        return self._store.state.active_pane

    def get_active_tab(self, pane_id: Optional[str] = None) -> Optional[Tab]:
        state = self._store.state
        pane = state.pane(self.resolve_pane_id(pane_id))
        if pane is None or pane.active_tab_id is None:
            return None
        return state.tabs.get(pane.active_tab_id)

    def get_unsaved_tabs(self, pane_id: Optional[str] = None) -> List[Tab]:
        state = self._store.state
        pane = state.pane(self.resolve_pane_id(pane_id))
        if pane is None:
            return []
        return [tab for tab in state.tabs_in(pane) if tab.is_dirty]

    # === Commands ===

    def set_active_pane(self, pane_id: str) -> bool:
        def transition(state: EditorState):
            if state.pane(pane_id) is None:
                logger.debug(f"set_active_pane ignored, unknown pane {pane_id}")
                return None
            if state.active_pane_id == pane_id:
                return None
            return replace(state, active_pane_id=pane_id)

        return self._store.update(transition)

    def set_active_tab(self, tab_id: str, pane_id: Optional[str] = None) -> bool:
        target = self.resolve_pane_id(pane_id)

        def transition(state: EditorState):
            pane = state.pane(target)
            if pane is None or not pane.contains(tab_id):
                logger.debug(f"set_active_tab ignored, {tab_id} not in {target}")
                return None
            if pane.active_tab_id == tab_id and state.active_pane_id == target:
                return None
            return replace(
                state.with_pane(replace(pane, active_tab_id=tab_id)), active_pane_id=target
            )

        return self._store.update(transition)

    def focus_tab(self, tab_id: str) -> bool:
        """Activate ``tab_id`` in whichever pane owns it, and that pane."""
        owner = self._store.state.pane_of(tab_id)
        if owner is None:
            return False
        self.set_active_tab(tab_id, owner.id)
        return True

    def next_tab(self, pane_id: Optional[str] = None) -> bool:
        return self._cycle(pane_id, +1)

    def previous_tab(self, pane_id: Optional[str] = None) -> bool:
        return self._cycle(pane_id, -1)

    def _cycle(self, pane_id: Optional[str], step: int) -> bool:
        target = self.resolve_pane_id(pane_id)

        def transition(state: EditorState):
            pane = state.pane(target)
            if pane is None or not pane.tab_ids or pane.active_tab_id is None:
                return None
            index = pane.index_of(pane.active_tab_id)
            new_active = pane.tab_ids[(index + step) % len(pane.tab_ids)]
            if new_active == pane.active_tab_id:
                return None
            return state.with_pane(replace(pane, active_tab_id=new_active))

        return self._store.update(transition)

    def resize_panes(self, sizes: Sequence[float]) -> bool:
        """
        Assign pane sizes in pane order.

        The caller supplies a valid partition; only the length is checked.
        """
        def transition(state: EditorState):
            if len(sizes) != len(state.panes):
                logger.debug(f"resize_panes ignored, {len(sizes)} sizes for {len(state.panes)} panes")
                return None
            return replace(
                state, panes=tuple(replace(p, size=s) for p, s in zip(state.panes, sizes))
            )

        return self._store.update(transition)

    def remove_tabs(
        self, pane_id: str, tab_ids: Iterable[str], select: ActiveSelector = active_after_removal
    ) -> List[str]:
        """
        Close tabs owned by ``pane_id``; ids not in that pane are skipped.

        ``select`` picks the pane's next active tab.

        Returns:
            Ids actually removed
        """
        pane = self._store.state.pane(pane_id)
        if pane is None:
            return []
        removed = [tid for tid in tab_ids if pane.contains(tid)]
        if removed:
            self._store.update(lambda state: remove_from_state(state, pane_id, removed, select))
            logger.debug(f"Removed {len(removed)} tab(s) from {pane_id}")
        return removed
