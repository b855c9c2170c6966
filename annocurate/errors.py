"""Exceptions raised by the curation core.

None of these are fatal: the session layer turns each of them into an error
value on the action result and leaves the session state untouched.
"""
from __future__ import annotations

from typing import Optional


class CurationError(Exception):
    """Base class for recoverable curation errors."""


class InvalidNavigation(CurationError):
    """Out-of-range sentence number, or a move past the first/last page or document."""

    def __init__(self, message: str, *, boundary: Optional[str] = None) -> None:
        super().__init__(message)
        self.boundary = boundary


class SnapshotUnavailable(CurationError):
    """A per-user annotation snapshot is missing or cannot be decoded."""

    def __init__(self, doc_id: str, username: str, reason: str) -> None:
        super().__init__(f"Snapshot for {username!r} on document {doc_id!r} is unavailable: {reason}")
        self.doc_id = doc_id
        self.username = username
        self.reason = reason


class NoDocumentSelected(CurationError):
    """An operation needs an active document but none is open."""

    def __init__(self, message: str = "Please open a document first!") -> None:
        super().__init__(message)


class DocumentNotEditable(CurationError):
    """The user already finished the document; their snapshots are read-only."""

    def __init__(self, doc_id: str, username: str) -> None:
        super().__init__(f"Document {doc_id!r} is finished for {username!r} and can no longer be edited")
        self.doc_id = doc_id
        self.username = username
