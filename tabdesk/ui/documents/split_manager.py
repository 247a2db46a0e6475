"""
Split management for the editor area.
Supports a single pane or one side-by-side / top-down split.
"""
from dataclasses import replace
from typing import Optional, Union
from loguru import logger

from .models import EditorState, MAX_PANES, Pane, SplitDirection
from .pane_set import active_after_removal
from .store import EditorStore


class SplitManager:
    """
    Creates and merges the second pane.

    ``split`` returns the new pane id synchronously, so callers that want
    to open something in the fresh pane use the return value directly
    instead of inspecting state afterwards.

    Usage:
        splits = SplitManager(store)
        new_id = splits.split(SplitDirection.VERTICAL, tab_id="/notes/a.md")
        splits.unsplit()
    """

    def __init__(self, store: EditorStore):
        self._store = store

    def split(
        self, direction: Union[SplitDirection, str], tab_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Split the editor area into two panes.

        Args:
            direction: Horizontal or vertical layout
            tab_id: Optional tab of the active pane to move into the new pane

        Returns:
            ID of the new pane, or None when already split
        """
        direction = SplitDirection(direction)
        state = self._store.state
        if len(state.panes) >= MAX_PANES:
            logger.debug("split ignored, already split")
            return None

        new_id = state.next_pane_id()
        halves = tuple(replace(p, size=50) for p in state.panes)
        new_state = replace(
            state, panes=halves + (Pane(new_id, size=50),), split_direction=direction
        )

        source = new_state.active_pane
        if tab_id is not None and source is not None and source.contains(tab_id):
            new_state = self._move_into_new_pane(new_state, source, new_id, tab_id)

        self._store.set(new_state)
        logger.info(f"Split {direction.value}: created {new_id}")
        return new_id

    @staticmethod
    def _move_into_new_pane(
        state: EditorState, source: Pane, new_id: str, tab_id: str
    ) -> EditorState:
        remaining, active = active_after_removal(source.tab_ids, source.active_tab_id, [tab_id])
        state = state.with_pane(replace(source, tab_ids=remaining, active_tab_id=active))
        target = state.pane(new_id)
        state = state.with_pane(replace(target, tab_ids=(tab_id,), active_tab_id=tab_id))
        return replace(state, active_pane_id=new_id)

    def unsplit(self) -> bool:
        """
        Merge all panes back into the first one.

        Tabs keep pane order; the first non-null active tab wins.
        """
        state = self._store.state
        if len(state.panes) <= 1:
            return False

        merged_ids = []
        for pane in state.panes:
            for tid in pane.tab_ids:
                if tid not in merged_ids:
                    merged_ids.append(tid)
        active = next((p.active_tab_id for p in state.panes if p.active_tab_id is not None), None)

        first = state.panes[0]
        # The first pane absorbs the others and keeps its identity
        merged = replace(first, tab_ids=tuple(merged_ids), active_tab_id=active, size=100)
        self._store.set(
            replace(state, panes=(merged,), active_pane_id=merged.id, split_direction=None)
        )
        logger.info(f"Unsplit: merged {len(merged_ids)} tab(s) into {merged.id}")
        return True

    def collapse_empty_pane(self) -> bool:
        """Unsplit when either pane of a split has no tabs left."""
        state = self._store.state
        if state.is_split and any(p.is_empty for p in state.panes):
            logger.debug("Collapsing split with an empty pane")
            return self.unsplit()
        return False
