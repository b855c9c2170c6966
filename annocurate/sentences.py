"""Sentence segmentation and lookup.

Sentences are cut once, when a document is imported, and stored with the
document.  Afterwards every lookup goes through :class:`SentenceIndex`, which
reads the stored spans back; offsets never change for the lifetime of a
document.
"""
from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from .errors import InvalidNavigation

if TYPE_CHECKING:  # pragma: no cover
    from .store import DocumentStore

# A sentence runs from the first non-blank character to terminal punctuation
# followed by whitespace, to a line break, or to the end of the text.
_SENTENCE_RE = re.compile(r"\S.*?(?:[.!?]+(?=\s|$)|(?=\n)|\Z)")


@dataclass(frozen=True)
class SentenceSpan:
    number: int
    begin: int
    end: int

    def contains_offset(self, offset: int) -> bool:
        return self.begin <= offset < self.end


def split_sentences(text: str) -> List[SentenceSpan]:
    spans: List[SentenceSpan] = []
    for match in _SENTENCE_RE.finditer(text):
        chunk = match.group()
        stripped = chunk.rstrip()
        if not stripped:
            continue
        begin = match.start()
        spans.append(SentenceSpan(number=len(spans) + 1, begin=begin, end=begin + len(stripped)))
    return spans


class SentenceIndex:
    """Read access to the stored sentence spans of a document."""

    def __init__(self, store: "DocumentStore") -> None:
        self.store = store

    def sentences(self, doc_id: str) -> List[SentenceSpan]:
        return self.store.sentences(doc_id)

    def sentence_count(self, doc_id: str) -> int:
        return len(self.sentences(doc_id))

    def sentence_by_number(self, doc_id: str, number: int) -> SentenceSpan:
        spans = self.sentences(doc_id)
        if not 1 <= number <= len(spans):
            raise InvalidNavigation(f"The sentence number entered is not valid: {number}")
        return spans[number - 1]

    def sentence_at(self, doc_id: str, offset: int) -> SentenceSpan:
        """Return the sentence covering ``offset``.

        An offset that falls in the blank space between two sentences
        resolves to the sentence that follows it.
        """
        spans = self.sentences(doc_id)
        if not spans or offset < 0 or offset >= spans[-1].end:
            raise InvalidNavigation(f"No sentence at offset {offset}")
        idx = bisect_right([span.begin for span in spans], offset) - 1
        if idx >= 0 and spans[idx].contains_offset(offset):
            return spans[idx]
        return spans[idx + 1]

    def following_sentences(self, doc_id: str, span: SentenceSpan, count: int) -> List[SentenceSpan]:
        if count <= 0:
            return []
        spans = self.sentences(doc_id)
        return spans[span.number : span.number + count]
