"""Database schema helpers."""
from __future__ import annotations

from pathlib import Path
import sqlite3

from .utils import ensure_dir


PROJECT_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS projects(
        project_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL,
        created_by TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS users(
        username TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS source_documents(
        doc_id TEXT PRIMARY KEY,
        project_id TEXT NOT NULL,
        name TEXT NOT NULL,
        order_index INTEGER NOT NULL,
        state TEXT NOT NULL CHECK(state IN (
            'NEW','ANNOTATION_IN_PROGRESS','ANNOTATION_FINISHED',
            'CURATION_IN_PROGRESS','CURATION_FINISHED'
        )),
        hash TEXT NOT NULL,
        text TEXT NOT NULL,
        UNIQUE(project_id, name),
        FOREIGN KEY(project_id) REFERENCES projects(project_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS sentences(
        doc_id TEXT NOT NULL,
        sentence_number INTEGER NOT NULL,
        begin_offset INTEGER NOT NULL,
        end_offset INTEGER NOT NULL,
        PRIMARY KEY(doc_id, sentence_number),
        FOREIGN KEY(doc_id) REFERENCES source_documents(doc_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS annotation_documents(
        doc_id TEXT NOT NULL,
        username TEXT NOT NULL,
        state TEXT NOT NULL CHECK(state IN ('NEW','IN_PROGRESS','FINISHED','IGNORE')),
        updated_at TEXT NOT NULL,
        PRIMARY KEY(doc_id, username),
        FOREIGN KEY(doc_id) REFERENCES source_documents(doc_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS annotation_snapshots(
        doc_id TEXT NOT NULL,
        username TEXT NOT NULL,
        version INTEGER NOT NULL,
        payload_json TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        PRIMARY KEY(doc_id, username),
        FOREIGN KEY(doc_id) REFERENCES source_documents(doc_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS correction_snapshots(
        doc_id TEXT PRIMARY KEY,
        username TEXT NOT NULL,
        version INTEGER NOT NULL,
        payload_json TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(doc_id) REFERENCES source_documents(doc_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS preferences(
        username TEXT NOT NULL,
        project_id TEXT NOT NULL,
        window_size INTEGER NOT NULL CHECK(window_size > 0),
        script_direction TEXT NOT NULL CHECK(script_direction IN ('LTR','RTL')),
        PRIMARY KEY(username, project_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS events(
        event_id TEXT PRIMARY KEY,
        ts TEXT NOT NULL,
        actor TEXT NOT NULL,
        event_type TEXT NOT NULL,
        payload_json TEXT
    );
    """,
    """CREATE INDEX IF NOT EXISTS idx_source_documents_project ON source_documents(project_id, order_index);""",
    """CREATE INDEX IF NOT EXISTS idx_annotation_documents_user ON annotation_documents(username);""",
]


def initialize_db(path: Path, schema: list[str]) -> sqlite3.Connection:
    """Create SQLite file with provided schema."""
    ensure_dir(path.parent)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    for statement in schema:
        conn.executescript(statement)
    conn.commit()
    return conn


def initialize_project_db(path: Path) -> sqlite3.Connection:
    return initialize_db(path, PROJECT_SCHEMA)
