"""Previous/next navigation over a user's worklist of source documents."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List

from .errors import InvalidNavigation
from .shared.models import SourceDocument

if TYPE_CHECKING:  # pragma: no cover
    from .store import DocumentStore

FIRST_DOCUMENT = "This is the first document!"
LAST_DOCUMENT = "This is the last document!"


class DocumentNavigator:
    """Navigable documents of a project for one user.

    The list is the project's documents in canonical order minus the ones the
    user has set to ``IGNORE``.  Nothing is cached: the ignore state can be
    changed by another session at any time, so every call reads it again.
    """

    def __init__(self, store: "DocumentStore", project_id: str, username: str) -> None:
        self.store = store
        self.project_id = project_id
        self.username = username

    def documents(self) -> List[SourceDocument]:
        documents = self.store.list_source_documents(self.project_id)
        ignored = self.store.ignored_documents(self.project_id, self.username)
        return [document for document in documents if document.doc_id not in ignored]

    def count(self) -> int:
        return len(self.documents())

    def index_of(self, doc_id: str) -> int:
        return self._index(self.documents(), doc_id)

    def position(self, doc_id: str) -> int:
        """1-based position of ``doc_id`` in the navigable list."""
        return self.index_of(doc_id) + 1

    def next(self, doc_id: str) -> SourceDocument:
        document = next(self._after(doc_id, reverse=False), None)
        if document is None:
            raise InvalidNavigation(LAST_DOCUMENT, boundary=LAST_DOCUMENT)
        return document

    def previous(self, doc_id: str) -> SourceDocument:
        document = next(self._after(doc_id, reverse=True), None)
        if document is None:
            raise InvalidNavigation(FIRST_DOCUMENT, boundary=FIRST_DOCUMENT)
        return document

    def _after(self, doc_id: str, *, reverse: bool) -> Iterator[SourceDocument]:
        """Navigable documents beyond ``doc_id`` in project order, nearest first.

        ``doc_id`` itself may be ignored; only its project position matters.
        """
        documents = self.store.list_source_documents(self.project_id)
        ignored = self.store.ignored_documents(self.project_id, self.username)
        position = self._index(documents, doc_id)
        neighbours = reversed(documents[:position]) if reverse else iter(documents[position + 1 :])
        return (document for document in neighbours if document.doc_id not in ignored)

    def _index(self, documents: List[SourceDocument], doc_id: str) -> int:
        for index, document in enumerate(documents):
            if document.doc_id == doc_id:
                return index
        raise InvalidNavigation(f"Document {doc_id} is not in the worklist of {self.username}")
