"""Document and snapshot ingestion."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Iterable, List

import pandas as pd

from .shared.models import NEW, SourceDocument
from .sentences import split_sentences
from .snapshots import Annotation
from .store import DocumentStore
from .utils import hash_text, new_id, validate_file_exists

TABULAR_EXTENSIONS = {".csv", ".parquet", ".pq"}

REQUIRED_COLUMNS = {"name", "text"}

_COLUMN_ALIAS_MAP = {
    "name": "name",
    "docname": "name",
    "documentname": "name",
    "title": "name",
    "filename": "name",
    "text": "text",
    "content": "text",
    "body": "text",
    "docid": "doc_id",
    "documentid": "doc_id",
}


def normalize_text(text: str) -> str:
    """Canonicalize document text before hashing and sentence splitting."""
    return "\n".join(line.rstrip() for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"))


def _canonical_column(column: str) -> str | None:
    normalized = re.sub(r"[^a-z0-9]", "", column.lower())
    return _COLUMN_ALIAS_MAP.get(normalized)


def load_tabular_documents(path: Path) -> List[dict]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    elif suffix in {".parquet", ".pq"}:
        df = pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported document format: {path.suffix}")
    rename: dict[str, str] = {}
    for column in df.columns:
        canonical = _canonical_column(str(column))
        if canonical:
            rename[column] = canonical
    df = df.rename(columns=rename)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Document table is missing required columns: {', '.join(sorted(missing))}")
    df = df.astype(object).where(pd.notnull(df), None)
    columns = [column for column in ("doc_id", "name", "text") if column in df.columns]
    return df[columns].to_dict(orient="records")


def import_documents(store: DocumentStore, project_id: str, rows: Iterable[dict]) -> List[SourceDocument]:
    """Add documents to the project in the order given.

    Documents whose name already exists in the project keep their identity
    and position; only their text and sentences are refreshed.
    """
    imported: List[SourceDocument] = []
    order_index = store.next_order_index(project_id)
    for index, row in enumerate(rows, start=1):
        name = str(row.get("name") or "").strip()
        if not name:
            raise ValueError(f"Row {index} is missing a document name")
        raw_text = row.get("text")
        if raw_text is None or not str(raw_text).strip():
            raise ValueError(f"Row {index} ({name}) is missing document text")
        text = normalize_text(str(raw_text))
        existing = store.find_source_document(project_id, name)
        if existing is not None:
            document = SourceDocument(
                doc_id=existing.doc_id,
                project_id=project_id,
                name=name,
                order_index=existing.order_index,
                state=existing.state,
                hash=hash_text(text),
                text=text,
            )
        else:
            document = SourceDocument(
                doc_id=str(row.get("doc_id") or "").strip() or new_id("doc"),
                project_id=project_id,
                name=name,
                order_index=order_index,
                state=NEW,
                hash=hash_text(text),
                text=text,
            )
            order_index += 1
        store.add_source_document(document, split_sentences(text))
        imported.append(document)
    return imported


def import_tabular_documents(store: DocumentStore, project_id: str, source: Path) -> List[SourceDocument]:
    rows = load_tabular_documents(source)
    if not rows:
        raise ValueError("Document table is empty")
    return import_documents(store, project_id, rows)


def import_snapshot_json(store: DocumentStore, project_id: str, path: Path) -> int:
    """Load one user's annotations from a JSON export.

    The file holds ``{"document": <name>, "username": ..., "annotations": [...]}``.
    Returns the number of annotations written.
    """
    data = json.loads(validate_file_exists(path).read_text("utf-8"))
    username = str(data.get("username") or "").strip()
    if not username:
        raise ValueError(f"{path} does not name a user")
    document = store.find_source_document(project_id, str(data.get("document") or ""))
    if document is None:
        raise ValueError(f"{path} refers to unknown document {data.get('document')!r}")
    annotations = [Annotation.from_dict(entry) for entry in data.get("annotations", [])]
    store.create_or_get_annotation_document(document.doc_id, username)
    store.write_annotation_snapshot(document.doc_id, username, annotations)
    return len(annotations)
