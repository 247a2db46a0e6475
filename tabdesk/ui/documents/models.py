"""
Editor state models.

Every value here is frozen. A transition never edits a snapshot in place:
it builds a new EditorState (dataclasses.replace) and the EditorStore swaps
it in, so observers only ever see complete states.
"""
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

DEFAULT_PANE_ID = "pane-1"
MAX_PANES = 2


class ViewMode(str, Enum):
    """How a tab's document is shown."""
    EDITOR = "editor"
    PREVIEW = "preview"
    SPLIT = "split"


class SplitDirection(str, Enum):
    """Layout direction while two panes are open."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class CursorPosition:
    line: int
    column: int


@dataclass(frozen=True)
class DocumentDescriptor:
    """
    What the file tree knows about a document.

    Only ``path`` matters to the tab core; the remaining fields ride along
    for display.
    """
    path: str
    name: str = ""
    tool_id: Optional[str] = None
    tokens: Optional[int] = None
    last_modified: Optional[float] = None
    size: Optional[int] = None

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", PurePath(self.path).name or self.path)


@dataclass(frozen=True)
class Tab:
    """
    One open document, keyed by its path.

    Attributes:
        document: Descriptor the tab was opened from
        content: Current (possibly edited) text
        original_content: Text as last loaded or saved
        view_mode: Editor/preview/split presentation
        cursor_position: Last known caret, if any
        load_error: Message when the document could not be read
    """
    document: DocumentDescriptor
    content: str
    original_content: str
    view_mode: ViewMode = ViewMode.SPLIT
    cursor_position: Optional[CursorPosition] = None
    load_error: Optional[str] = None

    @property
    def id(self) -> str:
        return self.document.path

    @property
    def path(self) -> str:
        return self.document.path

    @property
    def name(self) -> str:
        return self.document.name

    @property
    def is_dirty(self) -> bool:
        return self.content != self.original_content


@dataclass(frozen=True)
class Pane:
    """
    An ordered container of tab ids with one active tab.

    ``id`` is a display/layout name and is reused after a pane is removed
    (``pane-2`` comes back on the next split). ``instance_id`` is minted
    once per created pane and survives ``replace``, so async work can tell
    the pane it targeted from a later pane with the same id.
    """
    id: str
    tab_ids: Tuple[str, ...] = ()
    active_tab_id: Optional[str] = None
    size: float = 100
    instance_id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False, repr=False)

    def contains(self, tab_id: str) -> bool:
        return tab_id in self.tab_ids

    def index_of(self, tab_id: str) -> int:
        """Index of ``tab_id`` in this pane, or -1."""
        try:
            return self.tab_ids.index(tab_id)
        except ValueError:
            return -1

    @property
    def is_empty(self) -> bool:
        return not self.tab_ids


def frozen_tabs(tabs: Mapping[str, Tab]) -> Mapping[str, Tab]:
    """Wrap a tab dict in a read-only view."""
    return MappingProxyType(dict(tabs))


@dataclass(frozen=True)
class EditorState:
    """
    Complete snapshot of open tabs and pane layout.

    Attributes:
        tabs: Tab id (document path) -> Tab
        panes: One or two panes, in layout order
        active_pane_id: Pane receiving new tabs and keyboard focus
        split_direction: Set exactly when two panes exist
    """
    tabs: Mapping[str, Tab] = field(default_factory=lambda: frozen_tabs({}))
    panes: Tuple[Pane, ...] = field(default_factory=lambda: (Pane(DEFAULT_PANE_ID),))
    active_pane_id: str = DEFAULT_PANE_ID
    split_direction: Optional[SplitDirection] = None

    @classmethod
    def initial(cls) -> "EditorState":
        return cls()

    # === Lookups ===

    def pane(self, pane_id: Optional[str]) -> Optional[Pane]:
        for pane in self.panes:
            if pane.id == pane_id:
                return pane
        return None

    @property
    def active_pane(self) -> Optional[Pane]:
        return self.pane(self.active_pane_id)

    def pane_of(self, tab_id: str) -> Optional[Pane]:
        """Pane whose list owns ``tab_id``."""
        for pane in self.panes:
            if pane.contains(tab_id):
                return pane
        return None

    def tabs_in(self, pane: Pane) -> List[Tab]:
        return [self.tabs[tid] for tid in pane.tab_ids if tid in self.tabs]

    @property
    def is_split(self) -> bool:
        return len(self.panes) == MAX_PANES

    def next_pane_id(self) -> str:
        """Smallest ``pane-N`` id not currently in use."""
        used = {p.id for p in self.panes}
        n = 1
        while f"pane-{n}" in used:
            n += 1
        return f"pane-{n}"

    # === Functional updates ===

    def with_pane(self, pane: Pane) -> "EditorState":
        """Replace the pane that has ``pane.id``."""
        return replace(self, panes=tuple(pane if p.id == pane.id else p for p in self.panes))

    def with_tab(self, tab: Tab) -> "EditorState":
        tabs: Dict[str, Tab] = dict(self.tabs)
        tabs[tab.id] = tab
        return replace(self, tabs=frozen_tabs(tabs))

    def without_tabs(self, tab_ids: Iterable[str]) -> "EditorState":
        """Drop tabs from the map only; callers update pane lists."""
        doomed = set(tab_ids)
        return replace(
            self, tabs=frozen_tabs({k: v for k, v in self.tabs.items() if k not in doomed})
        )

    # === Invariants ===

    def check_invariants(self) -> List[str]:
        """Return human-readable violations; an empty list means valid."""
        problems: List[str] = []
        if len(self.panes) not in (1, MAX_PANES):
            problems.append(f"pane count is {len(self.panes)}")

        seen: Dict[str, str] = {}
        for pane in self.panes:
            for tid in pane.tab_ids:
                if tid in seen:
                    problems.append(f"tab {tid} listed in {seen[tid]} and {pane.id}")
                seen[tid] = pane.id
                if tid not in self.tabs:
                    problems.append(f"tab {tid} listed in {pane.id} but not open")
            if pane.active_tab_id is not None and not pane.contains(pane.active_tab_id):
                problems.append(f"{pane.id} active tab {pane.active_tab_id} not in its list")

        for tid in self.tabs:
            if tid not in seen:
                problems.append(f"tab {tid} is open but in no pane")

        if len({p.id for p in self.panes}) != len(self.panes):
            problems.append("duplicate pane ids")
        if self.pane(self.active_pane_id) is None:
            problems.append(f"active pane {self.active_pane_id} does not exist")
        if abs(sum(p.size for p in self.panes) - 100) > 1e-6:
            problems.append(f"pane sizes sum to {sum(p.size for p in self.panes)}")
        if (self.split_direction is not None) != (len(self.panes) == MAX_PANES):
            problems.append("split direction does not match pane count")
        return problems
