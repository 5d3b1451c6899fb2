"""Tests for artifact persistence."""

from pathlib import Path

import pytest

from bdd_telemetry.errors import SinkWriteError
from bdd_telemetry.rendering.document import Document
from bdd_telemetry.sink import open_artifact, write_document


def test_write_document_creates_parent_directories(tmp_path: Path) -> None:
    """Writes the content, creating missing directories."""
    destination = tmp_path / "reports" / "nested" / "dashboard.html"

    written = write_document(
        Document(content="<html></html>", media_type="text/html"), destination
    )

    assert written == destination
    assert destination.read_text(encoding="utf-8") == "<html></html>"
    assert list(destination.parent.iterdir()) == [destination]


def test_write_document_replaces_existing_artifact(tmp_path: Path) -> None:
    """An existing artifact is replaced in full."""
    destination = tmp_path / "summary.json"
    destination.write_text("old content that is longer", encoding="utf-8")

    write_document(Document(content="new", media_type="application/json"), destination)

    assert destination.read_text(encoding="utf-8") == "new"


def test_failed_write_keeps_previous_artifact(tmp_path: Path) -> None:
    """A failure while writing leaves the previous artifact and no temp file."""
    destination = tmp_path / "dashboard.html"
    destination.write_text("previous", encoding="utf-8")

    with pytest.raises(RuntimeError), open_artifact(destination) as handle:
        handle.write("partial")
        raise RuntimeError("render crashed")

    assert destination.read_text(encoding="utf-8") == "previous"
    assert list(tmp_path.iterdir()) == [destination]


def test_write_document_wraps_os_errors(tmp_path: Path) -> None:
    """Filesystem errors surface as SinkWriteError."""
    destination = tmp_path / "dashboard.html"
    destination.mkdir()

    with pytest.raises(SinkWriteError, match="dashboard.html"):
        write_document(Document(content="x", media_type="text/html"), destination)

    assert destination.is_dir()
