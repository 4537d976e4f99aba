"""Data models for the note janitor."""

from note_janitor.models.schema import (
    Document,
    Edit,
    LinkDefinition,
    Position,
    Range,
    ResolvedReference,
)

__all__ = [
    "Document",
    "Edit",
    "LinkDefinition",
    "Position",
    "Range",
    "ResolvedReference",
]
