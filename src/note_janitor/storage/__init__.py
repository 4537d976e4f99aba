"""Storage layer for the note janitor."""

from note_janitor.storage.markdown_parser import MarkdownParser, ParsedNote, WikiLink
from note_janitor.storage.workspace import Note, NoteWorkspace

__all__ = [
    "MarkdownParser",
    "Note",
    "NoteWorkspace",
    "ParsedNote",
    "WikiLink",
]
