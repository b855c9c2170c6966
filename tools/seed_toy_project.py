#!/usr/bin/env python
"""Seed a fully-populated toy curation project for demonstrations."""

from __future__ import annotations

import argparse
import re
import shutil
import sys
from pathlib import Path
from typing import Dict, List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from annocurate.corpus import import_documents
from annocurate.project import init_project, register_user
from annocurate.shared.models import FINISHED, IGNORE, SourceDocument
from annocurate.snapshots import Annotation
from annocurate.store import DocumentStore

PROJECT_ID = "Project_Toy"

USERS = [
    {"username": "alex", "name": "Alex Annotator", "email": "alex@example.test"},
    {"username": "blake", "name": "Blake Annotator", "email": "blake@example.test"},
    {"username": "casey", "name": "Casey Curator", "email": "casey@example.test"},
]

TOPICS = [
    ("Berlin", "Angela Merkel", "Bundestag"),
    ("Paris", "Marie Curie", "Sorbonne"),
    ("Madrid", "Miguel Cervantes", "Prado"),
    ("Vienna", "Gustav Klimt", "Belvedere"),
    ("Lisbon", "Fernando Pessoa", "Alfama"),
]


def generate_documents(total: int) -> List[Dict[str, str]]:
    documents: List[Dict[str, str]] = []
    for index in range(total):
        city, person, place = TOPICS[index % len(TOPICS)]
        sentences = [
            f"{person} arrived in {city} on a cold morning.",
            f"The visit to the {place} was planned weeks ahead.",
            f"Reporters from {city} followed {person} all day.",
            f"Later that evening the {place} hosted a reception.",
        ]
        # Vary the length so some documents span several windows.
        repeats = 2 + index % 4
        text = " ".join(sentences * repeats)
        documents.append({"name": f"doc_{index:02d}_{city.lower()}.txt", "text": text})
    return documents


def entity_annotations(document: SourceDocument, username: str) -> List[Annotation]:
    """Named-entity spans for one user, with a few deliberate disagreements."""
    city, person, place = next(topic for topic in TOPICS if topic[0].lower() in document.name)
    annotations: List[Annotation] = []
    for surface, label in ((person, "PER"), (city, "LOC"), (place, "LOC")):
        for number, match in enumerate(re.finditer(re.escape(surface), document.text)):
            chosen = label
            if username == "blake" and label == "LOC" and surface == place and number % 2 == 0:
                chosen = "ORG"
            if username == "blake" and label == "PER" and number % 3 == 2:
                continue
            annotations.append(
                Annotation(
                    annotation_id=f"{username}-{len(annotations)}",
                    layer="NamedEntity",
                    begin=match.start(),
                    end=match.end(),
                    label=chosen,
                )
            )
    return annotations


def seed_snapshots(store: DocumentStore, documents: Sequence[SourceDocument]) -> None:
    for document in documents:
        for username in ("alex", "blake"):
            store.create_or_get_annotation_document(document.doc_id, username)
            store.write_annotation_snapshot(document.doc_id, username, entity_annotations(document, username))
            store.set_annotation_state(document.doc_id, username, FINISHED)
    # casey skips the third document
    if len(documents) > 2:
        store.set_annotation_state(documents[2].doc_id, "casey", IGNORE)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the demo toy project")
    parser.add_argument("--project", default="demo/Project_Toy", help="Relative path to project root")
    parser.add_argument("--documents", type=int, default=10, help="Number of documents to generate")
    args = parser.parse_args()

    project_root = (REPO_ROOT / args.project).resolve()
    if project_root.exists():
        shutil.rmtree(project_root)

    paths = init_project(project_root, PROJECT_ID, "Project Toy", "toy_seed")
    store = DocumentStore.open(paths.project_db)
    for user in USERS:
        register_user(store, **user)
    documents = import_documents(store, PROJECT_ID, generate_documents(args.documents))
    seed_snapshots(store, documents)
    print(f"Seeded {len(documents)} documents at {project_root}")


if __name__ == "__main__":
    main()
