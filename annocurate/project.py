"""Project level helpers."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .shared.database import fetch_one
from .shared.models import Project, User
from .store import DocumentStore
from .utils import canonical_json, ensure_dir, utcnow


@dataclass
class ProjectPaths:
    root: Path
    project_db: Path
    imports_dir: Path
    exports_dir: Path


def build_project_paths(root: Path) -> ProjectPaths:
    return ProjectPaths(
        root=root,
        project_db=root / "project.db",
        imports_dir=root / "imports",
        exports_dir=root / "exports",
    )


def open_store(root: Path) -> DocumentStore:
    paths = build_project_paths(root)
    if not paths.project_db.exists():
        raise FileNotFoundError(f"No project found at {root}; run 'init' first")
    return DocumentStore.open(paths.project_db)


def init_project(root: Path, project_id: str, name: str, created_by: str) -> ProjectPaths:
    paths = build_project_paths(root)
    ensure_dir(paths.root)
    ensure_dir(paths.imports_dir)
    ensure_dir(paths.exports_dir)
    store = DocumentStore.open(paths.project_db)
    created_at = utcnow()
    with store.db.transaction() as conn:
        if fetch_one(conn, "SELECT 1 FROM projects WHERE project_id=?", (project_id,)) is None:
            Project(project_id=project_id, name=name, created_at=created_at, created_by=created_by).save(conn)
    metadata = {
        "project_id": project_id,
        "name": name,
        "created_at": created_at,
        "created_by": created_by,
    }
    (paths.root / "project_metadata.json").write_text(canonical_json(metadata), encoding="utf-8")
    return paths


def default_project_id(store: DocumentStore) -> Optional[str]:
    with store.db.reading() as conn:
        row = fetch_one(conn, "SELECT project_id FROM projects ORDER BY created_at ASC LIMIT 1")
    return row["project_id"] if row else None


def register_user(store: DocumentStore, username: str, name: str, email: str | None = None) -> None:
    with store.db.transaction() as conn:
        User(username=username, name=name, email=email).save(conn)
