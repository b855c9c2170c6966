"""Sentence window paging.

A document is shown one window of ``window_size`` sentences at a time.
Windows are aligned on blocks counted from the first sentence, so with 25
sentences and a window of 10 the pages are ``1-10``, ``11-20`` and ``21-25``.
The cursor keeps the number of the first visible sentence (the anchor) and
only moves it when a navigation call succeeds.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

from .errors import InvalidNavigation
from .sentences import SentenceSpan

if TYPE_CHECKING:  # pragma: no cover
    from .sentences import SentenceIndex

FIRST_PAGE = "This is the first page!"
LAST_PAGE = "This is the last page!"


@dataclass(frozen=True)
class VisibleWindow:
    first: int
    last: int
    sentence_count: int
    begin: int
    end: int

    def contains(self, number: int) -> bool:
        return self.first <= number <= self.last


@dataclass(frozen=True)
class WindowMove:
    """Outcome of a navigation call.

    ``changed`` is false when the call resolved to the window already shown;
    ``boundary`` then carries the message for the caller (first/last page).
    """

    window: VisibleWindow
    changed: bool
    boundary: Optional[str] = None


class WindowCursor:
    def __init__(self, sentences: Sequence[SentenceSpan], window_size: int, anchor: int = 1) -> None:
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self._sentences: List[SentenceSpan] = list(sentences)
        self.window_size = window_size
        if not self._sentences:
            self._anchor = 0
            return
        if not 1 <= anchor <= len(self._sentences):
            raise InvalidNavigation(f"The sentence number entered is not valid: {anchor}")
        self._anchor = self._block_start(anchor)

    @classmethod
    def from_index(
        cls, index: "SentenceIndex", doc_id: str, window_size: int, anchor: int = 1
    ) -> "WindowCursor":
        return cls(index.sentences(doc_id), window_size, anchor)

    @property
    def sentence_count(self) -> int:
        return len(self._sentences)

    @property
    def anchor(self) -> int:
        return self._anchor

    @property
    def page_count(self) -> int:
        return -(-self.sentence_count // self.window_size)

    @property
    def page_number(self) -> int:
        self._require_sentences()
        return (self._anchor - 1) // self.window_size + 1

    @property
    def window(self) -> VisibleWindow:
        self._require_sentences()
        last = min(self._anchor + self.window_size - 1, self.sentence_count)
        return VisibleWindow(
            first=self._anchor,
            last=last,
            sentence_count=self.sentence_count,
            begin=self._sentences[self._anchor - 1].begin,
            end=self._sentences[last - 1].end,
        )

    def window_contains(self, number: int) -> bool:
        return self.window.contains(number)

    def visible_sentences(self) -> List[SentenceSpan]:
        window = self.window
        return self._sentences[window.first - 1 : window.last]

    def next_window(self) -> WindowMove:
        self._require_sentences()
        target = self._anchor + self.window_size
        if target > self.sentence_count:
            target = self._anchor
        return self._move_to(target, LAST_PAGE)

    def previous_window(self) -> WindowMove:
        self._require_sentences()
        target = max(self._anchor - self.window_size, 1)
        return self._move_to(target, FIRST_PAGE)

    def first_window(self) -> WindowMove:
        self._require_sentences()
        return self._move_to(1, FIRST_PAGE)

    def last_window(self) -> WindowMove:
        self._require_sentences()
        return self._move_to(self._block_start(self.sentence_count), LAST_PAGE)

    def goto_sentence_number(self, number: int) -> WindowMove:
        if not self._sentences:
            raise InvalidNavigation("Please open a document first!")
        if not 1 <= number <= self.sentence_count:
            raise InvalidNavigation(f"The sentence number entered is not valid: {number}")
        return self._move_to(self._block_start(number), None)

    def _block_start(self, number: int) -> int:
        return ((number - 1) // self.window_size) * self.window_size + 1

    def _move_to(self, target: int, boundary: Optional[str]) -> WindowMove:
        if target == self._anchor:
            return WindowMove(self.window, changed=False, boundary=boundary)
        self._anchor = target
        return WindowMove(self.window, changed=True)

    def _require_sentences(self) -> None:
        if not self._sentences:
            raise InvalidNavigation("The document has no sentences")
