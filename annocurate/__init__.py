"""Sentence-window paging and suggestion merging for annotation curation."""
from __future__ import annotations

from .errors import CurationError, DocumentNotEditable, InvalidNavigation, NoDocumentSelected, SnapshotUnavailable
from .navigator import DocumentNavigator
from .session import ActionResult, CorrectionSession, SessionState
from .suggestions import CORRECTION_USER, CurationSegment, SuggestionAggregator
from .window import VisibleWindow, WindowCursor, WindowMove

__version__ = "0.1.0"

__all__ = [
    "ActionResult",
    "CORRECTION_USER",
    "CorrectionSession",
    "CurationError",
    "CurationSegment",
    "DocumentNotEditable",
    "DocumentNavigator",
    "InvalidNavigation",
    "NoDocumentSelected",
    "SessionState",
    "SnapshotUnavailable",
    "SuggestionAggregator",
    "VisibleWindow",
    "WindowCursor",
    "WindowMove",
    "__version__",
]
