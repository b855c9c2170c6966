"""Dataclass style records representing the persistent schema.

Each model mirrors one table of ``project.db`` (see :mod:`annocurate.schema`)
and inherits from :class:`Record`, which provides the row conversion and
``INSERT OR REPLACE`` helpers used by the document store.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database import Record


# ------------------------------ lifecycle states ---------------------------- #

NEW = "NEW"
ANNOTATION_IN_PROGRESS = "ANNOTATION_IN_PROGRESS"
ANNOTATION_FINISHED = "ANNOTATION_FINISHED"
CURATION_IN_PROGRESS = "CURATION_IN_PROGRESS"
CURATION_FINISHED = "CURATION_FINISHED"

SOURCE_DOCUMENT_STATES = (
    NEW,
    ANNOTATION_IN_PROGRESS,
    ANNOTATION_FINISHED,
    CURATION_IN_PROGRESS,
    CURATION_FINISHED,
)

IN_PROGRESS = "IN_PROGRESS"
FINISHED = "FINISHED"
IGNORE = "IGNORE"

ANNOTATION_DOCUMENT_STATES = (NEW, IN_PROGRESS, FINISHED, IGNORE)


# --------------------------------- tables ----------------------------------- #


@dataclass
class Project(Record):
    project_id: str
    name: str
    created_at: str
    created_by: str

    __tablename__ = "projects"


@dataclass
class User(Record):
    username: str
    name: str
    email: Optional[str] = None

    __tablename__ = "users"


@dataclass
class SourceDocument(Record):
    doc_id: str
    project_id: str
    name: str
    order_index: int
    state: str
    hash: str
    text: str

    __tablename__ = "source_documents"


@dataclass
class Sentence(Record):
    doc_id: str
    sentence_number: int
    begin_offset: int
    end_offset: int

    __tablename__ = "sentences"


@dataclass
class AnnotationDocument(Record):
    doc_id: str
    username: str
    state: str
    updated_at: str

    __tablename__ = "annotation_documents"


@dataclass
class SnapshotRow(Record):
    doc_id: str
    username: str
    version: int
    payload_json: str
    updated_at: str

    __tablename__ = "annotation_snapshots"


@dataclass
class CorrectionSnapshotRow(Record):
    doc_id: str
    username: str
    version: int
    payload_json: str
    updated_at: str

    __tablename__ = "correction_snapshots"


@dataclass
class Preference(Record):
    username: str
    project_id: str
    window_size: int
    script_direction: str

    __tablename__ = "preferences"


@dataclass
class Event(Record):
    event_id: str
    ts: str
    actor: str
    event_type: str
    payload_json: str

    __tablename__ = "events"
