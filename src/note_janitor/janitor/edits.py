"""Applying edits to document text."""

from typing import Iterable

from note_janitor.models.schema import Edit, Position


def position_to_offset(text: str, position: Position, eol: str = "\n") -> int:
    """Convert a (1-based line, 0-based column) position into a string offset.

    Raises:
        ValueError: If the position lies outside ``text``.
    """
    lines = text.split(eol)
    if position.line > len(lines):
        raise ValueError(
            f"Line {position.line} is past the end of a {len(lines)}-line document"
        )
    line = lines[position.line - 1]
    if position.character > len(line):
        raise ValueError(
            f"Column {position.character} is past the end of line {position.line}"
        )
    offset = sum(len(lines[i]) + len(eol) for i in range(position.line - 1))
    return offset + position.character


def end_position(text: str, eol: str = "\n") -> Position:
    """Position just past the last character of ``text``."""
    lines = text.split(eol)
    return Position(line=len(lines), character=len(lines[-1]))


def apply_edit(text: str, edit: Edit, eol: str = "\n") -> str:
    """Return ``text`` with ``edit`` applied."""
    start = position_to_offset(text, edit.range.start, eol)
    end = position_to_offset(text, edit.range.end, eol)
    return text[:start] + edit.new_text + text[end:]


def apply_edits(text: str, edits: Iterable[Edit], eol: str = "\n") -> str:
    """Apply several edits computed against the same ``text``.

    Edits are applied from the end of the document backwards so earlier
    positions stay valid. At equal starts a replacement goes before an
    insertion, which keeps the inserted text in front of the replaced span.
    """
    ordered = sorted(
        edits,
        key=lambda e: (
            e.range.start.line,
            e.range.start.character,
            e.range.end.line,
            e.range.end.character,
        ),
        reverse=True,
    )
    for edit in ordered:
        text = apply_edit(text, edit, eol)
    return text
