from __future__ import annotations

from typing import List

import pytest

from annocurate.errors import SnapshotUnavailable
from annocurate.shared.models import (
    ANNOTATION_FINISHED,
    ANNOTATION_IN_PROGRESS,
    IGNORE,
    NEW,
    Preference,
    SourceDocument,
)
from annocurate.snapshots import RELATION, Annotation, decode_payload, encode_payload
from annocurate.store import DocumentStore

from conftest import PROJECT_ID


def test_snapshot_versions_increase(store: DocumentStore, documents: List[SourceDocument]) -> None:
    doc_id = documents[1].doc_id
    assert store.read_annotation_snapshot(doc_id, "ann") is None

    store.write_annotation_snapshot(doc_id, "ann", [Annotation("a", "NamedEntity", 0, 8, "PER")])
    second = store.write_annotation_snapshot(doc_id, "ann", [])

    assert second.version == 2
    stored = store.read_annotation_snapshot(doc_id, "ann")
    assert stored.version == 2
    assert stored.annotations == ()
    assert len(store.events("snapshot_written")) == 2


def test_correction_snapshot_lifecycle(store: DocumentStore, documents: List[SourceDocument]) -> None:
    doc_id = documents[0].doc_id
    assert not store.exists_correction_snapshot(doc_id)
    with pytest.raises(SnapshotUnavailable):
        store.read_curation_snapshot(doc_id)

    store.write_curation_snapshot(doc_id, "cur", [Annotation("c", "NamedEntity", 0, 8, "X")])
    snapshot = store.read_curation_snapshot(doc_id)
    assert store.exists_correction_snapshot(doc_id)
    assert snapshot.username == "cur"
    assert [a.annotation_id for a in snapshot.annotations] == ["c"]


def test_corrupt_snapshot_is_reported(store: DocumentStore, documents: List[SourceDocument]) -> None:
    doc_id = documents[0].doc_id
    with store.db.transaction() as conn:
        conn.execute(
            "INSERT INTO annotation_snapshots(doc_id, username, version, payload_json, updated_at) VALUES (?,?,?,?,?)",
            (doc_id, "ann", 1, "{not json", "2024-01-01"),
        )
    with pytest.raises(SnapshotUnavailable) as excinfo:
        store.read_annotation_snapshot(doc_id, "ann")
    assert excinfo.value.doc_id == doc_id
    assert excinfo.value.username == "ann"


def test_document_state_moves_forward_only(store: DocumentStore, documents: List[SourceDocument]) -> None:
    doc_id = documents[0].doc_id
    assert store.transition_document_state(doc_id, NEW, ANNOTATION_IN_PROGRESS)
    assert not store.transition_document_state(doc_id, NEW, ANNOTATION_IN_PROGRESS)
    assert store.get_source_document(doc_id).state == ANNOTATION_IN_PROGRESS
    with pytest.raises(ValueError):
        store.transition_document_state(doc_id, ANNOTATION_FINISHED, ANNOTATION_IN_PROGRESS)
    assert len(store.events("document_state_changed")) == 1


def test_annotation_documents(store: DocumentStore, documents: List[SourceDocument]) -> None:
    doc_id = documents[0].doc_id
    record = store.create_or_get_annotation_document(doc_id, "ann")
    assert record.state == NEW
    store.set_annotation_state(doc_id, "ann", IGNORE)
    assert store.create_or_get_annotation_document(doc_id, "ann").state == IGNORE
    assert store.ignored_documents(PROJECT_ID, "ann") == {doc_id}
    assert store.ignored_documents(PROJECT_ID, "other") == set()
    with pytest.raises(ValueError):
        store.set_annotation_state(doc_id, "ann", "DONE")


def test_missing_document(store: DocumentStore) -> None:
    with pytest.raises(ValueError):
        store.get_source_document("nope")
    assert store.find_source_document(PROJECT_ID, "nope.txt") is None


def test_preferences_round_trip(store: DocumentStore) -> None:
    assert store.get_preferences("ann", PROJECT_ID) is None
    store.set_preferences(Preference("ann", PROJECT_ID, 7, "RTL"))
    store.set_preferences(Preference("ann", PROJECT_ID, 3, "LTR"))
    assert store.get_preferences("ann", PROJECT_ID) == Preference("ann", PROJECT_ID, 3, "LTR")


def test_relation_payload() -> None:
    relation = Annotation(
        "r1", "Dependency", 10, 13, "obj", kind=RELATION, features={"weight": "1"}, source_id="a", target_id="b"
    )
    (decoded,) = decode_payload(encode_payload([relation]))
    assert decoded == relation
    with pytest.raises(ValueError):
        Annotation("r2", "Dependency", 10, 13, kind=RELATION)
    with pytest.raises(ValueError):
        Annotation("s", "NamedEntity", 5, 2)
    with pytest.raises(ValueError):
        decode_payload('{"annotations": "none"}')
