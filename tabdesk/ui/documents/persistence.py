"""
Layout persistence - path-only snapshots of the pane/tab layout.

Only paths are persisted, never document content: on restore every tab is
reloaded from its source, and anything that no longer exists or cannot be
read is dropped instead of failing the whole restore.
"""
import asyncio
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from loguru import logger

from .errors import DocumentLoadError, LayoutFormatError
from .models import (
    DEFAULT_PANE_ID,
    MAX_PANES,
    DocumentDescriptor,
    EditorState,
    Pane,
    SplitDirection,
    Tab,
    frozen_tabs,
)
from .tab_registry import TabRegistry

LiveDocuments = Iterable[Union[str, DocumentDescriptor]]


# --- Persisted layout schema (camelCase on the wire) ---
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PersistedPane(_CamelModel):
    id: str
    tab_paths: List[str] = Field(default_factory=list)
    active_tab_path: Optional[str] = None
    size: float = 100

class PersistedLayout(_CamelModel):
    panes: List[PersistedPane] = Field(default_factory=list, max_length=MAX_PANES)
    active_pane_id: Optional[str] = None
    split_direction: Optional[SplitDirection] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> "PersistedLayout":
        """
        Validate a raw payload.

        Raises:
            LayoutFormatError: If the payload does not describe a layout
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise LayoutFormatError(f"Invalid persisted layout: {e}") from e


class PersistenceAdapter:
    """
    Converts between EditorState and PersistedLayout.

    Usage:
        adapter = PersistenceAdapter(registry)
        layout = adapter.serialize(store.state)
        state = await adapter.restore(layout, live_paths)
    """

    def __init__(
        self,
        registry: TabRegistry,
        default_split_direction: Union[SplitDirection, str] = SplitDirection.VERTICAL,
    ):
        self._registry = registry
        self.default_split_direction = SplitDirection(default_split_direction)

    def serialize(self, state: EditorState) -> PersistedLayout:
        return PersistedLayout(
            panes=[
                PersistedPane(
                    id=pane.id,
                    tab_paths=[state.tabs[tid].path for tid in pane.tab_ids if tid in state.tabs],
                    active_tab_path=pane.active_tab_id,
                    size=pane.size,
                )
                for pane in state.panes
            ],
            active_pane_id=state.active_pane_id,
            split_direction=state.split_direction,
        )

    async def restore(
        self, layout: Union[PersistedLayout, dict], live_documents: LiveDocuments
    ) -> EditorState:
        """
        Rebuild an EditorState from a persisted layout.

        Paths missing from ``live_documents`` or failing to load are dropped.
        Always yields at least one pane.

        Raises:
            LayoutFormatError: If ``layout`` is a dict that fails validation
        """
        if not isinstance(layout, PersistedLayout):
            layout = PersistedLayout.from_dict(layout)

        live: Dict[str, DocumentDescriptor] = {}
        for doc in live_documents:
            descriptor = doc if isinstance(doc, DocumentDescriptor) else DocumentDescriptor(doc)
            live[descriptor.path] = descriptor

        wanted: List[str] = []
        for entry in layout.panes:
            for path in entry.tab_paths:
                if path in live and path not in wanted:
                    wanted.append(path)
        contents = await self._load_all(wanted)

        view_mode = self._registry.default_view_mode
        tabs: Dict[str, Tab] = {}
        panes: List[Pane] = []
        for index, entry in enumerate(layout.panes):
            kept: List[str] = []
            for path in entry.tab_paths:
                if path in contents and path not in tabs:
                    tabs[path] = Tab(live[path], contents[path], contents[path], view_mode=view_mode)
                    kept.append(path)
            if not kept and index > 0:
                logger.debug(f"Dropping empty pane {entry.id} on restore")
                continue

            active = entry.active_tab_path if entry.active_tab_path in kept else (kept[0] if kept else None)
            pane_id = entry.id
            if any(p.id == pane_id for p in panes):
                pane_id = EditorState(panes=tuple(panes)).next_pane_id()
            panes.append(Pane(pane_id, tuple(kept), active, entry.size))

        if not panes:
            panes.append(Pane(DEFAULT_PANE_ID))
        panes = self._normalize_sizes(panes)

        active_pane_id = layout.active_pane_id
        if not any(p.id == active_pane_id for p in panes):
            active_pane_id = panes[0].id

        split_direction = None
        if len(panes) == MAX_PANES:
            split_direction = layout.split_direction or self.default_split_direction

        logger.info(f"Restored {len(tabs)} tab(s) in {len(panes)} pane(s)")
        return EditorState(
            tabs=frozen_tabs(tabs),
            panes=tuple(panes),
            active_pane_id=active_pane_id,
            split_direction=split_direction,
        )

    async def _load_all(self, paths: List[str]) -> Dict[str, str]:
        results = await asyncio.gather(
            *(self._registry.read(path) for path in paths), return_exceptions=True
        )
        contents: Dict[str, str] = {}
        for path, result in zip(paths, results):
            if isinstance(result, DocumentLoadError):
                logger.warning(f"Dropping {path} from restored layout: {result.cause}")
            elif isinstance(result, BaseException):
                raise result
            else:
                contents[path] = result
        return contents

    @staticmethod
    def _normalize_sizes(panes: List[Pane]) -> List[Pane]:
        if len(panes) == 1:
            return [replace(panes[0], size=100)]
        if abs(sum(p.size for p in panes) - 100) > 1e-6:
            return [replace(p, size=50) for p in panes]
        return panes
