"""
Session State - Persists and restores the editor's pane/tab layout.

Integrates with:
- DocumentManager: serializes and rebuilds its EditorState
- ConfigManager: ``session.session_file`` chooses the file on disk
"""
import json
from pathlib import Path
from typing import Optional
from loguru import logger

from tabdesk.core.base_system import BaseSystem
from tabdesk.ui.documents.document_manager import DocumentManager
from tabdesk.ui.documents.errors import LayoutFormatError
from tabdesk.ui.documents.persistence import LiveDocuments, PersistedLayout


class SessionState(BaseSystem):
    """
    Persists and restores the editor layout across application runs.

    Depends on DocumentManager, so it starts after it and shuts down (and
    saves) before it.

    Usage:
        session = locator.get_system(SessionState)

        # On startup, once the file tree is known
        await session.restore(scanned_paths)

        # On shutdown (called automatically)
        session.save()
    """
    depends_on = (DocumentManager,)

    def __init__(self, locator, config):
        """Initialize SessionState."""
        super().__init__(locator, config)
        self._save_path = Path(config.data.session.session_file)
        self._layout: Optional[PersistedLayout] = None

    @property
    def layout(self) -> Optional[PersistedLayout]:
        """Layout loaded from disk (or last saved), if any."""
        return self._layout

    async def initialize(self):
        """Initialize and load previous session."""
        await super().initialize()
        self._load_from_disk()
        logger.info(f"SessionState initialized (file: {self._save_path})")

    async def shutdown(self):
        """Save session on shutdown."""
        self.save()
        await super().shutdown()

    def _load_from_disk(self) -> None:
        """Load the persisted layout from disk."""
        if not self._save_path.exists():
            return
        try:
            with open(self._save_path, 'r', encoding="utf-8") as f:
                self._layout = PersistedLayout.from_dict(json.load(f))
            logger.info(f"Loaded session layout: {len(self._layout.panes)} pane(s)")
        except (OSError, ValueError, LayoutFormatError) as e:
            logger.warning(f"Failed to load session: {e}")
            self._layout = None

    def save(self) -> bool:
        """Save the current layout to disk."""
        layout = self.require(DocumentManager).get_persisted_state()
        try:
            self._save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._save_path, 'w', encoding="utf-8") as f:
                json.dump(layout.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save session: {e}")
            return False
        self._layout = layout
        logger.info(f"Session saved to {self._save_path}")
        return True

    async def restore(self, live_documents: LiveDocuments) -> bool:
        """
        Rebuild the editor from the loaded layout.

        Args:
            live_documents: Paths (or descriptors) currently known to exist

        Returns:
            True if a saved layout was applied
        """
        if self._layout is None:
            logger.info("No session to restore")
            return False
        await self.require(DocumentManager).restore_state(self._layout, live_documents)
        return True
