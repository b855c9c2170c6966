from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from annocurate.corpus import import_documents
from annocurate.project import init_project
from annocurate.shared.models import SourceDocument
from annocurate.store import DocumentStore

PROJECT_ID = "P1"


def numbered_text(count: int) -> str:
    return " ".join(f"Sentence number {index} is here." for index in range(1, count + 1))


def add_document(store: DocumentStore, name: str, text: str) -> SourceDocument:
    (document,) = import_documents(store, PROJECT_ID, [{"name": name, "text": text}])
    return document


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    paths = init_project(tmp_path / "project", PROJECT_ID, "Test project", "tester")
    return DocumentStore.open(paths.project_db)


@pytest.fixture
def documents(store: DocumentStore) -> List[SourceDocument]:
    return [
        add_document(store, "long.txt", numbered_text(25)),
        add_document(store, "short.txt", numbered_text(5)),
    ]
