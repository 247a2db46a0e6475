"""
Editor Store - holder of the current EditorState snapshot.

All tab/pane components read the snapshot, compute a successor, and hand
it back here. The swap is a single assignment followed by one
``state_changed`` emission, so there is no window in which a half-applied
transition is visible.
"""
from typing import Callable, Optional
from PySide6.QtCore import QObject, Signal
from loguru import logger

from .models import EditorState


class _StoreSignals(QObject):
    """Signal holder to avoid metaclass conflict."""
    state_changed = Signal(object)  # EditorState


class EditorStore:
    """
    Owns the EditorState snapshot for one DocumentManager.

    Usage:
        store = EditorStore()
        store.signals.state_changed.connect(view.render)
        store.update(lambda s: s.with_pane(...))
    """

    def __init__(self, initial: Optional[EditorState] = None):
        self._state = initial or EditorState.initial()
        self._signals = _StoreSignals()

    @property
    def signals(self) -> _StoreSignals:
        """Get Qt signals object for UI binding."""
        return self._signals

    @property
    def state(self) -> EditorState:
        return self._state

    def get(self) -> EditorState:
        return self._state

    def set(self, new_state: EditorState) -> None:
        """Swap in a new snapshot and notify observers."""
        if new_state is self._state:
            return
        self._state = new_state
        self._signals.state_changed.emit(new_state)

    def update(self, transition: Callable[[EditorState], Optional[EditorState]]) -> bool:
        """
        Apply ``transition`` to the current snapshot.

        The transition returns the successor state, or None / the same
        object to signal a no-op.

        Returns:
            True if the state changed
        """
        current = self._state
        new_state = transition(current)
        if new_state is None or new_state is current:
            return False
        self.set(new_state)
        return True

    def reset(self) -> None:
        """Return to a single empty pane."""
        logger.debug("EditorStore reset to initial state")
        self.set(EditorState.initial())
