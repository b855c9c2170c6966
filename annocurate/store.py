"""SQLite-backed document store.

The curation core only needs a narrow view of the project: the ordered
source documents, their sentences, the per-user annotation documents and
snapshots, and the correction snapshot.  :class:`DocumentStore` provides
exactly that on top of ``project.db``.  Every read opens a fresh connection
and reads a snapshot row once, so a concurrent writer (another annotator
saving their own snapshot) is never observed mid-write.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .errors import SnapshotUnavailable
from .schema import initialize_project_db
from .sentences import SentenceSpan
from .shared.database import Database, fetch_all, fetch_one
from .shared.models import (
    IGNORE,
    NEW,
    SOURCE_DOCUMENT_STATES,
    ANNOTATION_DOCUMENT_STATES,
    AnnotationDocument,
    CorrectionSnapshotRow,
    Event,
    Preference,
    Sentence,
    SnapshotRow,
    SourceDocument,
)
from .snapshots import Annotation, AnnotationSnapshot, decode_payload, encode_payload
from .utils import new_id, utcnow

LOGGER = logging.getLogger(__name__)


class DocumentStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    @classmethod
    def open(cls, path: Path | str) -> "DocumentStore":
        """Open ``project.db`` at ``path``, creating the schema when needed."""
        initialize_project_db(Path(path)).close()
        return cls(Database(path))

    # ----------------------------- documents ------------------------------ #

    def list_source_documents(self, project_id: str) -> List[SourceDocument]:
        with self.db.reading() as conn:
            rows = fetch_all(
                conn,
                "SELECT * FROM source_documents WHERE project_id=? ORDER BY order_index, doc_id",
                (project_id,),
            )
        return [SourceDocument.from_row(row) for row in rows]

    def get_source_document(self, doc_id: str) -> SourceDocument:
        with self.db.reading() as conn:
            row = fetch_one(conn, "SELECT * FROM source_documents WHERE doc_id=?", (doc_id,))
        if row is None:
            raise ValueError(f"Source document {doc_id} not found")
        return SourceDocument.from_row(row)

    def find_source_document(self, project_id: str, name: str) -> Optional[SourceDocument]:
        with self.db.reading() as conn:
            row = fetch_one(
                conn,
                "SELECT * FROM source_documents WHERE project_id=? AND name=?",
                (project_id, name),
            )
        return SourceDocument.from_row(row) if row else None

    def add_source_document(self, document: SourceDocument, sentences: Iterable[SentenceSpan]) -> None:
        with self.db.transaction() as conn:
            document.save(conn)
            conn.execute("DELETE FROM sentences WHERE doc_id=?", (document.doc_id,))
            Sentence.insert_many(
                conn,
                (
                    Sentence(document.doc_id, span.number, span.begin, span.end)
                    for span in sentences
                ),
            )

    def next_order_index(self, project_id: str) -> int:
        with self.db.reading() as conn:
            row = fetch_one(
                conn,
                "SELECT COALESCE(MAX(order_index), -1) AS last FROM source_documents WHERE project_id=?",
                (project_id,),
            )
        return int(row["last"]) + 1 if row else 0

    def transition_document_state(self, doc_id: str, from_state: str, to_state: str) -> bool:
        """Move a source document forward; returns ``False`` if it was not in ``from_state``."""
        if to_state not in SOURCE_DOCUMENT_STATES:
            raise ValueError(f"Unknown document state: {to_state}")
        if SOURCE_DOCUMENT_STATES.index(to_state) <= SOURCE_DOCUMENT_STATES.index(from_state):
            raise ValueError(f"Document state cannot move from {from_state} to {to_state}")
        with self.db.transaction() as conn:
            cur = conn.execute(
                "UPDATE source_documents SET state=? WHERE doc_id=? AND state=?",
                (to_state, doc_id, from_state),
            )
            moved = cur.rowcount > 0
            if moved:
                self._log_event(conn, "system", "document_state_changed", {
                    "doc_id": doc_id,
                    "from": from_state,
                    "to": to_state,
                })
        return moved

    def sentences(self, doc_id: str) -> List[SentenceSpan]:
        with self.db.reading() as conn:
            rows = fetch_all(
                conn,
                "SELECT sentence_number, begin_offset, end_offset FROM sentences "
                "WHERE doc_id=? ORDER BY begin_offset",
                (doc_id,),
            )
        return [
            SentenceSpan(number=row["sentence_number"], begin=row["begin_offset"], end=row["end_offset"])
            for row in rows
        ]

    # ------------------------ annotation documents ------------------------ #

    def annotation_state(self, doc_id: str, username: str) -> Optional[str]:
        with self.db.reading() as conn:
            row = fetch_one(
                conn,
                "SELECT state FROM annotation_documents WHERE doc_id=? AND username=?",
                (doc_id, username),
            )
        return row["state"] if row else None

    def create_or_get_annotation_document(self, doc_id: str, username: str) -> AnnotationDocument:
        with self.db.transaction() as conn:
            row = fetch_one(
                conn,
                "SELECT * FROM annotation_documents WHERE doc_id=? AND username=?",
                (doc_id, username),
            )
            if row is not None:
                return AnnotationDocument.from_row(row)
            record = AnnotationDocument(doc_id=doc_id, username=username, state=NEW, updated_at=utcnow())
            record.save(conn)
            return record

    def set_annotation_state(self, doc_id: str, username: str, state: str) -> None:
        if state not in ANNOTATION_DOCUMENT_STATES:
            raise ValueError(f"Unknown annotation document state: {state}")
        with self.db.transaction() as conn:
            AnnotationDocument(doc_id=doc_id, username=username, state=state, updated_at=utcnow()).save(conn)
            self._log_event(conn, username, "annotation_state_changed", {"doc_id": doc_id, "state": state})

    def annotation_documents(self, doc_id: str) -> List[AnnotationDocument]:
        with self.db.reading() as conn:
            rows = fetch_all(
                conn,
                "SELECT * FROM annotation_documents WHERE doc_id=? ORDER BY username",
                (doc_id,),
            )
        return [AnnotationDocument.from_row(row) for row in rows]

    def ignored_documents(self, project_id: str, username: str) -> Set[str]:
        with self.db.reading() as conn:
            rows = fetch_all(
                conn,
                """
                SELECT ad.doc_id FROM annotation_documents ad
                JOIN source_documents sd ON sd.doc_id = ad.doc_id
                WHERE sd.project_id=? AND ad.username=? AND ad.state=?
                """,
                (project_id, username, IGNORE),
            )
        return {row["doc_id"] for row in rows}

    # ------------------------------ snapshots ----------------------------- #

    def read_annotation_snapshot(self, doc_id: str, username: str) -> Optional[AnnotationSnapshot]:
        """Return the user's snapshot, ``None`` when the user never started.

        Raises :class:`SnapshotUnavailable` when the stored payload is corrupt.
        """
        with self.db.reading() as conn:
            row = fetch_one(
                conn,
                "SELECT * FROM annotation_snapshots WHERE doc_id=? AND username=?",
                (doc_id, username),
            )
        if row is None:
            return None
        return self._decode(SnapshotRow.from_row(row))

    def write_annotation_snapshot(
        self, doc_id: str, username: str, annotations: Iterable[Annotation]
    ) -> AnnotationSnapshot:
        items = tuple(annotations)
        with self.db.transaction() as conn:
            version = self._next_version(
                conn, "SELECT version FROM annotation_snapshots WHERE doc_id=? AND username=?", (doc_id, username)
            )
            record = SnapshotRow(doc_id, username, version, encode_payload(items), utcnow())
            record.save(conn)
            self._log_event(conn, username, "snapshot_written", {"doc_id": doc_id, "version": version})
        return AnnotationSnapshot(doc_id, username, version, items, record.updated_at)

    def exists_correction_snapshot(self, doc_id: str) -> bool:
        with self.db.reading() as conn:
            row = fetch_one(conn, "SELECT 1 FROM correction_snapshots WHERE doc_id=?", (doc_id,))
        return row is not None

    def read_curation_snapshot(self, doc_id: str) -> AnnotationSnapshot:
        with self.db.reading() as conn:
            row = fetch_one(conn, "SELECT * FROM correction_snapshots WHERE doc_id=?", (doc_id,))
        if row is None:
            raise SnapshotUnavailable(doc_id, "", "no correction snapshot has been created")
        return self._decode(CorrectionSnapshotRow.from_row(row))

    def write_curation_snapshot(
        self, doc_id: str, username: str, annotations: Iterable[Annotation]
    ) -> AnnotationSnapshot:
        items = tuple(annotations)
        with self.db.transaction() as conn:
            version = self._next_version(
                conn, "SELECT version FROM correction_snapshots WHERE doc_id=?", (doc_id,)
            )
            record = CorrectionSnapshotRow(doc_id, username, version, encode_payload(items), utcnow())
            record.save(conn)
            self._log_event(conn, username, "correction_written", {"doc_id": doc_id, "version": version})
        return AnnotationSnapshot(doc_id, username, version, items, record.updated_at)

    def _next_version(self, conn: sqlite3.Connection, sql: str, params: tuple) -> int:
        row = fetch_one(conn, sql, params)
        return int(row["version"]) + 1 if row else 1

    def _decode(self, record: SnapshotRow | CorrectionSnapshotRow) -> AnnotationSnapshot:
        try:
            annotations = decode_payload(record.payload_json)
        except ValueError as exc:
            raise SnapshotUnavailable(record.doc_id, record.username, str(exc)) from exc
        return AnnotationSnapshot(
            doc_id=record.doc_id,
            username=record.username,
            version=record.version,
            annotations=annotations,
            updated_at=record.updated_at,
        )

    # ---------------------------- preferences ----------------------------- #

    def get_preferences(self, username: str, project_id: str) -> Optional[Preference]:
        with self.db.reading() as conn:
            row = fetch_one(
                conn,
                "SELECT * FROM preferences WHERE username=? AND project_id=?",
                (username, project_id),
            )
        return Preference.from_row(row) if row else None

    def set_preferences(self, preference: Preference) -> None:
        with self.db.transaction() as conn:
            preference.save(conn)

    # ------------------------------- events ------------------------------- #

    def log_event(self, actor: str, event_type: str, payload: dict) -> None:
        with self.db.transaction() as conn:
            self._log_event(conn, actor, event_type, payload)

    def events(self, event_type: str | None = None) -> List[Event]:
        sql = "SELECT * FROM events"
        params: list = []
        if event_type:
            sql += " WHERE event_type=?"
            params.append(event_type)
        sql += " ORDER BY ts, event_id"
        with self.db.reading() as conn:
            rows = fetch_all(conn, sql, params)
        return [Event.from_row(row) for row in rows]

    def _log_event(self, conn: sqlite3.Connection, actor: str, event_type: str, payload: dict) -> None:
        Event(
            event_id=new_id("evt"),
            ts=utcnow(),
            actor=actor,
            event_type=event_type,
            payload_json=json.dumps(payload, sort_keys=True),
        ).save(conn)
        LOGGER.debug("event %s by %s: %s", event_type, actor, payload)
