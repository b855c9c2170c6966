from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from annocurate.admin_cli import app
from annocurate.project import open_store

runner = CliRunner()


def _invoke(*args: str):
    result = runner.invoke(app, list(args))
    assert result.exit_code == 0, result.output
    return result


def _write_snapshot(path: Path, username: str, label: str) -> Path:
    path.write_text(
        json.dumps(
            {
                "document": "a.txt",
                "username": username,
                "annotations": [
                    {"annotation_id": f"{username}-1", "layer": "NamedEntity", "begin": 0, "end": 5, "label": "PER"},
                    {"annotation_id": f"{username}-2", "layer": "NamedEntity", "begin": 10, "end": 13, "label": label},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    _invoke("init", str(root), "--project-id", "P1", "--name", "Demo")
    table = tmp_path / "docs.csv"
    pd.DataFrame(
        {"name": ["a.txt", "b.txt"], "text": ["Alice met Bob. Carol saw Dave.", "Nothing here."]}
    ).to_csv(table, index=False)
    result = _invoke("import-documents", str(root), "--table", str(table))
    assert "Imported 2 document(s)" in result.output
    for username, label in (("u1", "PER"), ("u2", "ORG")):
        snapshot = _write_snapshot(tmp_path / f"{username}.json", username, label)
        _invoke("import-snapshot", str(root), "--snapshot-json", str(snapshot))
        _invoke("setstate", str(root), "--document", "a.txt", "--username", username, "--state", "finished")
    return root


def test_init_creates_project_files(project: Path) -> None:
    assert (project / "project.db").exists()
    assert json.loads((project / "project_metadata.json").read_text("utf-8"))["project_id"] == "P1"
    assert (project / "exports").is_dir()


def test_commands_need_an_initialized_project(tmp_path: Path) -> None:
    result = runner.invoke(app, ["listdocuments", str(tmp_path / "missing"), "--username", "u1"])
    assert result.exit_code != 0
    assert isinstance(result.exception, FileNotFoundError)


def test_adduser_and_setstate(project: Path) -> None:
    _invoke("adduser", str(project), "--username", "cur", "--name", "Curator")
    _invoke("setstate", str(project), "--document", "b.txt", "--username", "cur", "--state", "IGNORE")
    store = open_store(project)
    (b_doc,) = [d for d in store.list_source_documents("P1") if d.name == "b.txt"]
    assert store.annotation_state(b_doc.doc_id, "cur") == "IGNORE"

    result = runner.invoke(
        app, ["setstate", str(project), "--document", "b.txt", "--username", "cur", "--state", "DONE"]
    )
    assert result.exit_code != 0


def test_listdocuments_runs(project: Path) -> None:
    result = _invoke("listdocuments", str(project), "--username", "u1")
    assert "a.txt" in result.output


def test_segment_export(project: Path) -> None:
    result = _invoke("segment", str(project), "--document", "a.txt", "--export", "segment.csv")
    assert "Disagreeing positions: 1" in result.output

    frame = pd.read_csv(project / "exports" / "segment.csv")
    assert sorted(frame["username"].unique()) == ["u1", "u2"]
    assert len(frame) == 4


def test_segment_rejects_bad_sentence(project: Path) -> None:
    result = runner.invoke(app, ["segment", str(project), "--document", "a.txt", "--sentence", "9"])
    assert result.exit_code != 0


def test_agreement_report(project: Path) -> None:
    result = _invoke("agreement", str(project), "--document", "a.txt", "--user", "u1", "--user", "u2")
    assert "Positions: 2" in result.output
    assert "Percent agreement: 0.500" in result.output


def test_negative_window_size_in_environment(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANNOCURATE_WINDOW_SIZE", "-3")
    result = _invoke("segment", str(project), "--document", "a.txt")
    assert "Disagreeing positions: 1" in result.output
