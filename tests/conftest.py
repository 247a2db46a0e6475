import asyncio
from typing import Dict, List, Optional, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from tabdesk.core.config import ConfigManager
from tabdesk.core.locator import ServiceLocator
from tabdesk.ui.documents.document_io import DocumentIO
from tabdesk.ui.documents.document_manager import DocumentManager
from tabdesk.ui.documents.models import DocumentDescriptor


class FakeDocumentIO(DocumentIO):
    """
    In-memory document source.

    Paths listed in ``fail_reads`` / ``fail_writes`` raise OSError. A gate
    created with ``gate_read`` / ``gate_write`` holds that path's I/O until
    the test sets it, which is how tests interleave commands with loads.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})
        self.fail_reads = set()
        self.fail_writes = set()
        self.reads: List[str] = []
        self.writes: List[Tuple[str, str]] = []
        self._read_gates: Dict[str, asyncio.Event] = {}
        self._write_gates: Dict[str, asyncio.Event] = {}

    def gate_read(self, path: str) -> asyncio.Event:
        self._read_gates[path] = asyncio.Event()
        return self._read_gates[path]

    def gate_write(self, path: str) -> asyncio.Event:
        self._write_gates[path] = asyncio.Event()
        return self._write_gates[path]

    async def read_document(self, path: str) -> str:
        self.reads.append(path)
        gate = self._read_gates.get(path)
        if gate is not None:
            await gate.wait()
        if path in self.fail_reads:
            raise PermissionError(f"Permission denied: '{path}'")
        if path not in self.files:
            raise FileNotFoundError(f"No such file: '{path}'")
        return self.files[path]

    async def write_document(self, path: str, content: str) -> None:
        gate = self._write_gates.get(path)
        if gate is not None:
            await gate.wait()
        if path in self.fail_writes:
            raise PermissionError(f"Permission denied: '{path}'")
        self.writes.append((path, content))
        self.files[path] = content


A = "/docs/a.md"
B = "/docs/b.md"
C = "/docs/c.md"
D = "/docs/d.md"


def doc(path: str) -> DocumentDescriptor:
    return DocumentDescriptor(path)


async def settle():
    """Let already-scheduled tasks run to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture(scope="session")
def qapp():
    """Qt signals need a core application instance."""
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def fake_io():
    return FakeDocumentIO({A: "alpha", B: "bravo", C: "charlie", D: "delta"})


@pytest.fixture
def config():
    return ConfigManager(None)


@pytest.fixture
def locator(config):
    return ServiceLocator(config)


@pytest.fixture
def manager(qapp, locator, config, fake_io):
    """DocumentManager wired to the in-memory I/O fake."""
    return locator.register_system(DocumentManager, DocumentManager(locator, config, io=fake_io))
