"""Command-line admin tools."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.table import Table

from .config import CurationConfig, configure_logging
from .corpus import import_snapshot_json, import_tabular_documents
from .errors import CurationError
from .metrics import cohens_kappa
from .navigator import DocumentNavigator
from .project import build_project_paths, default_project_id, init_project, open_store, register_user
from .shared.models import ANNOTATION_DOCUMENT_STATES, SourceDocument
from .sentences import SentenceIndex
from .store import DocumentStore
from .suggestions import SuggestionAggregator
from .utils import ensure_dir
from .window import WindowCursor

app = typer.Typer(help="annocurate admin CLI")



@app.callback()
def _setup() -> None:
    configure_logging()


def _project_id(store: DocumentStore, project_id: Optional[str]) -> str:
    resolved = project_id or default_project_id(store)
    if not resolved:
        raise typer.BadParameter("Project metadata missing; ensure the project has been initialized")
    return resolved


def _document(store: DocumentStore, project_id: str, name: str) -> SourceDocument:
    document = store.find_source_document(project_id, name)
    if document is None:
        raise typer.BadParameter(f"Unknown document {name!r}")
    return document


@app.command()
def init(
    project_dir: Path = typer.Argument(..., help="Project directory"),
    project_id: str = typer.Option(..., help="Unique project identifier"),
    name: str = typer.Option(..., help="Project display name"),
    created_by: str = typer.Option("cli", help="Creator identifier"),
) -> None:
    """Initialize project folder."""
    paths = init_project(project_dir, project_id, name, created_by)
    print(f"Initialized project at {paths.root}")


@app.command()
def adduser(
    project_dir: Path = typer.Argument(...),
    username: str = typer.Option(...),
    name: str = typer.Option(...),
    email: Optional[str] = typer.Option(None),
) -> None:
    register_user(open_store(project_dir), username, name, email)
    print(f"Registered user {username}")


@app.command()
def import_documents(
    project_dir: Path = typer.Argument(...),
    table: Path = typer.Option(..., help="CSV or parquet file with name and text columns"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    store = open_store(project_dir)
    documents = import_tabular_documents(store, _project_id(store, project_id), table)
    print(f"Imported {len(documents)} document(s)")


@app.command()
def import_snapshot(
    project_dir: Path = typer.Argument(...),
    snapshot_json: Path = typer.Option(..., help="JSON export of one user's annotations"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    store = open_store(project_dir)
    count = import_snapshot_json(store, _project_id(store, project_id), snapshot_json)
    print(f"Stored {count} annotation(s) from {snapshot_json}")


@app.command()
def setstate(
    project_dir: Path = typer.Argument(...),
    document: str = typer.Option(..., help="Document name"),
    username: str = typer.Option(...),
    state: str = typer.Option(..., help="NEW, IN_PROGRESS, FINISHED or IGNORE"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    state = state.upper()
    if state not in ANNOTATION_DOCUMENT_STATES:
        raise typer.BadParameter(f"State must be one of {', '.join(ANNOTATION_DOCUMENT_STATES)}")
    store = open_store(project_dir)
    doc = _document(store, _project_id(store, project_id), document)
    store.set_annotation_state(doc.doc_id, username, state)
    print(f"{document} is now {state} for {username}")


@app.command()
def listdocuments(
    project_dir: Path = typer.Argument(...),
    username: str = typer.Option(..., help="List the worklist of this user"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    store = open_store(project_dir)
    navigator = DocumentNavigator(store, _project_id(store, project_id), username)
    index = SentenceIndex(store)
    table = Table(title=f"Documents for {username}")
    table.add_column("#")
    table.add_column("Name")
    table.add_column("Document state")
    table.add_column("User state")
    table.add_column("Sentences")
    for position, document in enumerate(navigator.documents(), start=1):
        table.add_row(
            str(position),
            document.name,
            document.state,
            store.annotation_state(document.doc_id, username) or "-",
            str(index.sentence_count(document.doc_id)),
        )
    print(table)


@app.command()
def segment(
    project_dir: Path = typer.Argument(...),
    document: str = typer.Option(..., help="Document name"),
    sentence: int = typer.Option(1, help="Any sentence number inside the wanted window"),
    window_size: Optional[int] = typer.Option(None, help="Sentences per window"),
    user: List[str] = typer.Option([], help="Users to merge; defaults to users who finished"),
    include_correction: bool = typer.Option(True, help="Add the correction snapshot"),
    export: Optional[Path] = typer.Option(None, help="Write the merged segment to this CSV"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    """Show the merged annotations of one sentence window."""
    store = open_store(project_dir)
    doc = _document(store, _project_id(store, project_id), document)
    cursor = WindowCursor.from_index(SentenceIndex(store), doc.doc_id, window_size or CurationConfig().window_size)
    try:
        cursor.goto_sentence_number(sentence)
    except CurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    aggregator = SuggestionAggregator(store)
    users = user or aggregator.users_for_curation(doc.doc_id)
    merged = aggregator.build_for_window(doc.doc_id, cursor.window, users, include_correction=include_correction)
    frame = merged.to_frame()
    table = Table(title=f"{document}: sentences {cursor.window.first}-{cursor.window.last}")
    for column in ("username", "layer", "kind", "begin", "end", "label"):
        table.add_column(column)
    for record in frame.itertuples(index=False):
        table.add_row(
            record.username, record.layer, record.kind, str(record.begin), str(record.end), str(record.label or "")
        )
    print(table)
    if merged.missing_users:
        print(f"No snapshot yet: {', '.join(merged.missing_users)}")
    if merged.failed_users:
        print(f"[red]Unreadable snapshot:[/red] {', '.join(merged.failed_users)}")
    print(f"Disagreeing positions: {len(merged.disagreements())}; agreement {merged.agreement():.3f}")
    if export is not None:
        target = export if export.is_absolute() else build_project_paths(project_dir).exports_dir / export
        ensure_dir(target.parent)
        frame.to_csv(target, index=False)
        print(f"Segment written to {target}")


@app.command()
def agreement(
    project_dir: Path = typer.Argument(...),
    document: str = typer.Option(..., help="Document name"),
    user: List[str] = typer.Option(..., help="Exactly two users to compare"),
    project_id: Optional[str] = typer.Option(None),
) -> None:
    """Cohen's kappa between two users over the whole document."""
    if len(user) != 2:
        raise typer.BadParameter("Pass --user exactly twice")
    store = open_store(project_dir)
    doc = _document(store, _project_id(store, project_id), document)
    merged = SuggestionAggregator(store).build(doc.doc_id, 0, len(doc.text), user)
    if len(merged.users) < 2:
        print("Both users need a readable snapshot")
        return
    first, second = user
    pairs = [
        ("|".join(per_user[first]) if first in per_user else None, "|".join(per_user[second]) if second in per_user else None)
        for per_user in merged.positions().values()
    ]
    print(f"Positions: {len(pairs)}")
    print(f"Cohen's kappa: {cohens_kappa(pairs):.3f}")
    print(f"Percent agreement: {merged.agreement():.3f}")


if __name__ == "__main__":
    app()
