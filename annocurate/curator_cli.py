"""Console-based correction client."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.prompt import Prompt
from rich.table import Table

from .config import configure_logging
from .project import default_project_id, open_store
from .session import CURATION, CORRECTION, ActionResult, CorrectionSession, SessionState

app = typer.Typer(help="Lightweight console curator")

COMMANDS = {
    "n": "next page",
    "p": "previous page",
    "f": "first page",
    "l": "last page",
    "g": "go to sentence",
    "N": "next document",
    "P": "previous document",
    "t": "toggle script direction",
    "d": "finish document",
    "q": "quit",
}


def _show(session: CorrectionSession, result: ActionResult) -> None:
    for message in result.alerts:
        print(f"[yellow]{message}[/yellow]")
    state = result.state
    if not state.has_document or result.segment is None:
        return
    document = session.store.get_source_document(state.doc_id)
    cursor = session.cursor(state)
    print(f"\n[bold]{document.name}[/bold] {session.status_label(state)} ({state.script_direction})")
    for span in cursor.visible_sentences():
        print(f"  {span.number:>4}  {document.text[span.begin:span.end]}")
    table = Table(show_header=True)
    table.add_column("user")
    table.add_column("layer")
    table.add_column("span")
    table.add_column("label")
    disagreeing = set(result.segment.disagreements())
    for username, annotations in result.segment.annotations_by_user.items():
        for annotation in annotations:
            style = "red" if annotation.position in disagreeing else ""
            table.add_row(
                username,
                annotation.layer,
                document.text[annotation.begin:annotation.end],
                annotation.label or "",
                style=style,
            )
    print(table)


def _dispatch(session: CorrectionSession, state: SessionState, command: str) -> Optional[ActionResult]:
    if command == "n":
        return session.next_page(state)
    if command == "p":
        return session.previous_page(state)
    if command == "f":
        return session.first_page(state)
    if command == "l":
        return session.last_page(state)
    if command == "g":
        raw = Prompt.ask("Sentence number")
        try:
            number = int(raw)
        except ValueError:
            print("[yellow]The sentence number entered is not valid[/yellow]")
            return None
        return session.goto_sentence(state, number)
    if command == "N":
        return session.next_document(state)
    if command == "P":
        return session.previous_document(state)
    if command == "t":
        return session.toggle_script_direction(state)
    if command == "d":
        return session.finish_document(state)
    return None


@app.command()
def open_project(
    project_dir: Path = typer.Argument(...),
    username: str = typer.Option(...),
    document: Optional[str] = typer.Option(None, help="Document name; defaults to the first in the worklist"),
    curation: bool = typer.Option(False, help="Merge every user who finished instead of correcting"),
) -> None:
    """Interactive loop for paging through a document."""
    configure_logging()
    store = open_store(project_dir)
    project_id = default_project_id(store)
    if not project_id:
        raise typer.BadParameter("Project metadata missing; ensure the project has been initialized")
    session = CorrectionSession(store)
    state = session.start(project_id, username, mode=CURATION if curation else CORRECTION)
    if document:
        target = store.find_source_document(project_id, document)
        if target is None:
            raise typer.BadParameter(f"Unknown document {document!r}")
    else:
        worklist = session.navigator(state).documents()
        if not worklist:
            typer.echo("No documents to curate.")
            return
        target = worklist[0]
    result = session.open_document(state, target.doc_id)
    _show(session, result)
    state = result.state
    help_text = ", ".join(f"{key}={label}" for key, label in COMMANDS.items())
    while True:
        command = Prompt.ask(f"Command ({help_text})", default="n")
        if command == "q":
            break
        result = _dispatch(session, state, command)
        if result is None:
            continue
        state = result.state
        _show(session, result)
    session.save_preferences(state)
    typer.echo("Session closed.")


if __name__ == "__main__":
    app()
