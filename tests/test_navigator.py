from __future__ import annotations

import pytest

from annocurate.errors import InvalidNavigation
from annocurate.navigator import FIRST_DOCUMENT, LAST_DOCUMENT, DocumentNavigator
from annocurate.shared.models import IGNORE, IN_PROGRESS
from annocurate.store import DocumentStore

from conftest import PROJECT_ID, add_document


@pytest.fixture
def doc_ids(store: DocumentStore) -> list[str]:
    return [add_document(store, name, f"Text of {name}.").doc_id for name in ("d1", "d2", "d3", "d4")]


def _names(navigator: DocumentNavigator) -> list[str]:
    return [document.name for document in navigator.documents()]


def test_ignored_documents_are_excluded_in_canonical_order(store: DocumentStore, doc_ids: list[str]) -> None:
    store.set_annotation_state(doc_ids[1], "ann", IGNORE)
    store.set_annotation_state(doc_ids[2], "someone_else", IGNORE)
    navigator = DocumentNavigator(store, PROJECT_ID, "ann")

    assert _names(navigator) == ["d1", "d3", "d4"]
    assert navigator.count() == 3
    assert navigator.position(doc_ids[3]) == 3
    assert navigator.next(doc_ids[0]).doc_id == doc_ids[2]
    assert navigator.previous(doc_ids[2]).doc_id == doc_ids[0]
    with pytest.raises(InvalidNavigation):
        navigator.index_of(doc_ids[1])


def test_boundaries_do_not_wrap(store: DocumentStore, doc_ids: list[str]) -> None:
    navigator = DocumentNavigator(store, PROJECT_ID, "ann")
    with pytest.raises(InvalidNavigation) as excinfo:
        navigator.next(doc_ids[-1])
    assert excinfo.value.boundary == LAST_DOCUMENT
    with pytest.raises(InvalidNavigation) as excinfo:
        navigator.previous(doc_ids[0])
    assert excinfo.value.boundary == FIRST_DOCUMENT
    assert navigator.index_of(doc_ids[-1]) == 3


def test_ignore_state_is_reread_on_every_call(store: DocumentStore, doc_ids: list[str]) -> None:
    navigator = DocumentNavigator(store, PROJECT_ID, "ann")
    store.set_annotation_state(doc_ids[3], "ann", IGNORE)
    with pytest.raises(InvalidNavigation):
        navigator.next(doc_ids[2])

    store.set_annotation_state(doc_ids[3], "ann", IN_PROGRESS)
    assert navigator.next(doc_ids[2]).doc_id == doc_ids[3]


def test_other_projects_are_not_listed(store: DocumentStore, doc_ids: list[str]) -> None:
    assert DocumentNavigator(store, "other", "ann").documents() == []


def test_ignored_current_document_can_still_be_left(store: DocumentStore, doc_ids: list[str]) -> None:
    navigator = DocumentNavigator(store, PROJECT_ID, "ann")
    store.set_annotation_state(doc_ids[1], "ann", IGNORE)
    store.set_annotation_state(doc_ids[2], "ann", IGNORE)

    assert navigator.next(doc_ids[1]).doc_id == doc_ids[3]
    assert navigator.previous(doc_ids[2]).doc_id == doc_ids[0]
    with pytest.raises(InvalidNavigation) as excinfo:
        navigator.previous(doc_ids[0])
    assert excinfo.value.boundary == FIRST_DOCUMENT
    with pytest.raises(InvalidNavigation):
        navigator.next("doc_missing")
