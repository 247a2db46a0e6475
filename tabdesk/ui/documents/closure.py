"""
Closure Coordinator - unsaved-change confirmation before tabs close.

State machine:

    IDLE --(close touching dirty tabs)--> AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION --(save | discard | cancel)--> IDLE

Clean tabs close immediately. When the tabs a close targets include dirty
ones, a single PendingClose lists every dirty tab and the UI answers it
with one CloseDecision.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from PySide6.QtCore import QObject, Signal
from loguru import logger

from .errors import CloseAbortedError, DocumentSaveError
from .models import Tab
from .pane_set import (
    ActiveSelector,
    PaneSet,
    activate_kept,
    active_after_close,
    active_after_removal,
    active_or_first,
)
from .tab_registry import TabRegistry


class ClosureState(Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class CloseDecision(str, Enum):
    """User's answer to an unsaved-changes prompt."""
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PendingClose:
    """
    A close waiting on confirmation.

    Attributes:
        pane_id: Pane the tabs are closed from
        tab_ids: Every tab the close will remove (clean ones included)
        dirty_tabs: The unsaved tabs the prompt lists
        operation: "close", "close_others" or "close_all"
        keep_tab_id: Tab that close_others leaves open and activates
    """
    pane_id: str
    tab_ids: Tuple[str, ...]
    dirty_tabs: Tuple[Tab, ...]
    operation: str
    keep_tab_id: Optional[str] = None

    @property
    def subject(self) -> str:
        """Display name for the prompt: the file name, or "N files"."""
        if len(self.dirty_tabs) == 1:
            return self.dirty_tabs[0].name
        return f"{len(self.dirty_tabs)} files"


class _ClosureSignals(QObject):
    """Signal holder to avoid metaclass conflict."""
    confirmation_requested = Signal(object)  # PendingClose
    confirmation_resolved = Signal(str)  # CloseDecision value


class ClosureCoordinator:
    """
    Sequences confirmation, saving and removal for every close command.

    Usage:
        pending = closer.close_all("pane-1")
        if pending:
            show_dialog(pending.subject)
            ...
            await closer.resolve(CloseDecision.SAVE)
    """

    def __init__(
        self,
        panes: PaneSet,
        registry: TabRegistry,
        after_removal: Optional[Callable[[], None]] = None,
    ):
        self._panes = panes
        self._registry = registry
        self._after_removal = after_removal
        self._signals = _ClosureSignals()
        self._pending: Optional[PendingClose] = None

    @property
    def signals(self) -> _ClosureSignals:
        """Get Qt signals object for UI binding."""
        return self._signals

    @property
    def state(self) -> ClosureState:
        if self._pending is None:
            return ClosureState.IDLE
        return ClosureState.AWAITING_CONFIRMATION

    @property
    def pending(self) -> Optional[PendingClose]:
        return self._pending

    # === Close requests ===

    def close(self, tab_id: str, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        """Close one tab; returns the pending prompt if it is dirty."""
        target = self._panes.resolve_pane_id(pane_id)
        pane = self._panes.state.pane(target)
        if pane is None or not pane.contains(tab_id):
            logger.debug(f"close ignored, {tab_id} not in {target}")
            return None
        return self._request(target, (tab_id,), "close")

    def close_others(self, tab_id: str, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        """Close every tab in the pane except ``tab_id``."""
        target = self._panes.resolve_pane_id(pane_id)
        pane = self._panes.state.pane(target)
        if pane is None or not pane.contains(tab_id):
            logger.debug(f"close_others ignored, {tab_id} not in {target}")
            return None
        others = tuple(tid for tid in pane.tab_ids if tid != tab_id)
        if not others:
            self._panes.set_active_tab(tab_id, target)
            return None
        return self._request(target, others, "close_others", keep_tab_id=tab_id)

    def close_all(self, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        target = self._panes.resolve_pane_id(pane_id)
        pane = self._panes.state.pane(target)
        if pane is None:
            return None
        return self._request(target, pane.tab_ids, "close_all")

    def close_active(self, pane_id: Optional[str] = None) -> Optional[PendingClose]:
        target = self._panes.resolve_pane_id(pane_id)
        pane = self._panes.state.pane(target)
        if pane is None or pane.active_tab_id is None:
            return None
        return self.close(pane.active_tab_id, target)

    def close_saved(self, pane_id: Optional[str] = None) -> List[str]:
        """Close clean tabs only. Never prompts; dirty tabs stay put."""
        target = self._panes.resolve_pane_id(pane_id)
        state = self._panes.state
        pane = state.pane(target)
        if pane is None:
            return []
        clean = [tab.id for tab in state.tabs_in(pane) if not tab.is_dirty]
        return self._remove({target: clean}, active_or_first)

    def _request(
        self, pane_id: str, tab_ids: Sequence[str], operation: str, keep_tab_id: Optional[str] = None
    ) -> Optional[PendingClose]:
        if not tab_ids:
            return None
        tabs = self._panes.state.tabs
        dirty = tuple(tabs[tid] for tid in tab_ids if tid in tabs and tabs[tid].is_dirty)
        if not dirty:
            self._remove({pane_id: list(tab_ids)}, self._selector(operation, keep_tab_id))
            return None

        if self._pending is not None:
            logger.debug(f"Replacing pending {self._pending.operation} with {operation}")
        self._pending = PendingClose(pane_id, tuple(tab_ids), dirty, operation, keep_tab_id)
        logger.info(f"{operation} awaiting confirmation for {len(dirty)} unsaved tab(s)")
        self._signals.confirmation_requested.emit(self._pending)
        return self._pending

    # === Resolution ===

    async def resolve(self, decision: CloseDecision) -> List[str]:
        """
        Answer the pending prompt.

        SAVE writes every listed tab and closes only if all writes succeed;
        tabs that did save before another failed stay open (now clean).
        DISCARD closes without saving. CANCEL drops the request. Tabs close in
        whichever pane holds them when the answer arrives; closed ones are
        skipped.

        Returns:
            Ids of the tabs that were closed

        Raises:
            CloseAbortedError: SAVE was chosen and at least one write failed
        """
        decision = CloseDecision(decision)
        pending = self._pending
        if pending is None:
            logger.debug(f"resolve({decision.value}) with nothing pending")
            return []
        self._pending = None
        self._signals.confirmation_resolved.emit(decision.value)

        if decision is CloseDecision.CANCEL:
            logger.info(f"{pending.operation} cancelled")
            return []

        if decision is CloseDecision.SAVE:
            results = await asyncio.gather(
                *(self._registry.save(tab.id) for tab in pending.dirty_tabs),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, DocumentSaveError)]
            unexpected = [r for r in results if isinstance(r, BaseException) and not isinstance(r, DocumentSaveError)]
            if unexpected:
                raise unexpected[0]
            if failures:
                logger.warning(f"{pending.operation} aborted: {len(failures)} save(s) failed")
                raise CloseAbortedError(failures)

        return self._remove(
            self._current_owners(pending), self._selector(pending.operation, pending.keep_tab_id)
        )

    def _current_owners(self, pending: PendingClose) -> Dict[str, List[str]]:
        """Group the planned tab ids by the pane that owns each one now."""
        state = self._panes.state
        owners: Dict[str, List[str]] = {}
        for tid in pending.tab_ids:
            owner = state.pane_of(tid)
            if owner is None:
                logger.debug(f"{tid} already closed before {pending.operation} resolved")
                continue
            if owner.id != pending.pane_id:
                logger.debug(f"{tid} moved from {pending.pane_id} to {owner.id}, closing it there")
            owners.setdefault(owner.id, []).append(tid)
        return owners

    @staticmethod
    def _selector(operation: str, keep_tab_id: Optional[str] = None) -> ActiveSelector:
        if operation == "close":
            return active_after_close
        if operation == "close_others":
            return activate_kept(keep_tab_id)
        return active_after_removal

    def _remove(self, plan: Dict[str, List[str]], select: ActiveSelector) -> List[str]:
        removed: List[str] = []
        for pane_id, tab_ids in plan.items():
            removed.extend(self._panes.remove_tabs(pane_id, tab_ids, select))
        if removed and self._after_removal is not None:
            self._after_removal()
        return removed
