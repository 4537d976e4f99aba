"""Common test fixtures for the note janitor."""

import logging
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from note_janitor.config import JanitorConfig
from note_janitor.janitor.edits import apply_edit
from note_janitor.models.schema import Document, Edit, ResolvedReference
from note_janitor.storage.markdown_parser import MarkdownParser
from note_janitor.storage.workspace import NoteWorkspace


@pytest.fixture(autouse=True)
def _reset_janitor_logging():
    """Drop handlers added by configure_logging so tests stay isolated."""
    yield
    root = logging.getLogger("note_janitor")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def parser() -> MarkdownParser:
    return MarkdownParser()


@pytest.fixture
def make_document(parser) -> Callable[..., Document]:
    """Parse text into a document carrying the given resolved references."""

    def _make(
        text: str,
        references: Optional[List[ResolvedReference]] = None,
        identifier: str = "note",
    ) -> Document:
        document = parser.parse(text, identifier=identifier).document
        return document.with_references(references or [])

    return _make


@pytest.fixture
def apply() -> Callable[[Document, Edit], str]:
    def _apply(document: Document, edit: Edit) -> str:
        return apply_edit(document.text, edit, document.eol)

    return _apply


@pytest.fixture
def notes_dir(tmp_path) -> Path:
    """An empty notes directory."""
    path = tmp_path / "notes"
    path.mkdir()
    return path


@pytest.fixture
def write_note(notes_dir) -> Callable[[str, str], Path]:
    """Write a note below the notes directory, creating parent folders."""

    def _write(relative: str, text: str) -> Path:
        path = notes_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        return path

    return _write


@pytest.fixture
def janitor_config(notes_dir, monkeypatch) -> JanitorConfig:
    """A config pointed at the test notes directory, independent of the environment."""
    for name in (
        "NOTE_JANITOR_EXTENSION",
        "NOTE_JANITOR_INCLUDE_EXTENSIONS",
        "NOTE_JANITOR_GENERATE_HEADINGS",
        "NOTE_JANITOR_GENERATE_REFERENCES",
        "NOTE_JANITOR_STRICT_BLOCKS",
        "NOTE_JANITOR_LOG_LEVEL",
        "NOTE_JANITOR_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    return JanitorConfig(notes_dir=notes_dir)


@pytest.fixture
def load_workspace(notes_dir) -> Callable[[], NoteWorkspace]:
    def _load() -> NoteWorkspace:
        return NoteWorkspace(notes_dir).load()

    return _load


@pytest.fixture
def read_note() -> Callable[[Path], str]:
    """Read a note back without newline translation."""

    def _read(path: Path) -> str:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    return _read
