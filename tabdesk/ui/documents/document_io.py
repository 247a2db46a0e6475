"""
Document I/O - the reader/writer collaborators the tab core depends on.

The core never touches the file system directly; it awaits these two
calls and treats any OSError they raise as a load or save failure.
"""
import asyncio
from abc import ABC, abstractmethod
from pathlib import Path


class DocumentIO(ABC):
    """
    Strategy interface for reading and writing document content.
    """

    @abstractmethod
    async def read_document(self, path: str) -> str:
        """Return the document's text. Raises OSError on failure."""
        pass

    @abstractmethod
    async def write_document(self, path: str, content: str) -> None:
        """Persist the document's text. Raises OSError on failure."""
        pass


class FileSystemDocumentIO(DocumentIO):
    """Reads and writes text files on the local disk off the event loop."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def read_document(self, path: str) -> str:
        return await asyncio.to_thread(self._read_sync, path)

    async def write_document(self, path: str, content: str) -> None:
        await asyncio.to_thread(self._write_sync, path, content)

    def _read_sync(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except UnicodeDecodeError as e:
            raise OSError(f"{path} is not valid {self.encoding} text: {e}") from e

    def _write_sync(self, path: str, content: str) -> None:
        Path(path).write_text(content, encoding=self.encoding)
