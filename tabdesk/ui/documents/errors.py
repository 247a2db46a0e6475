"""
Errors raised by the document tab core.

Structural misuse (a third pane, stale drag payloads, unknown ids) is never
raised; those operations are silent no-ops. Only I/O failures and malformed
persisted layouts reach the caller.
"""
from typing import List


class TabDeskError(Exception):
    """Base class for all tab core errors."""
    pass


class DocumentLoadError(TabDeskError):
    """A document could not be read."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause


class DocumentSaveError(TabDeskError):
    """A document could not be written. The tab stays dirty."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Failed to save {path}: {cause}")
        self.path = path
        self.cause = cause


class CloseAbortedError(TabDeskError):
    """A save-then-close confirmation failed; no tab was removed."""

    def __init__(self, failures: List[DocumentSaveError]):
        paths = ", ".join(f.path for f in failures)
        super().__init__(f"Close aborted, could not save: {paths}")
        self.failures = failures


class LayoutFormatError(TabDeskError):
    """A persisted layout payload failed validation."""
    pass
