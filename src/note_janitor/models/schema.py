"""Data models for the note janitor.

Positions use 1-based lines and 0-based columns, so a document without
front matter starts at ``Position(line=1, character=0)``.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class Position(BaseModel):
    """A location in a document."""

    line: int = Field(..., ge=1, description="1-based line number")
    character: int = Field(..., ge=0, description="0-based column")

    model_config = {"frozen": True, "extra": "forbid"}

    def __lt__(self, other: "Position") -> bool:
        return (self.line, self.character) < (other.line, other.character)

    def __le__(self, other: "Position") -> bool:
        return (self.line, self.character) <= (other.line, other.character)


class Range(BaseModel):
    """A half-open span between two positions."""

    start: Position
    end: Position

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.end < self.start:
            raise ValueError("Range end precedes its start")
        return self

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @classmethod
    def create_from_position(
        cls, start: Position, end: Optional[Position] = None
    ) -> "Range":
        """Create a range; omitting ``end`` gives an empty range at ``start``."""
        return cls(start=start, end=end if end is not None else start)


class Edit(BaseModel):
    """A text edit: replace ``range`` with ``new_text``.

    An empty range is a pure insertion.
    """

    range: Range
    new_text: str

    model_config = {"frozen": True, "extra": "forbid"}


class LinkDefinition(BaseModel):
    """A reference-style link definition, ``[label]: target "title"``."""

    label: str
    target: str
    title: Optional[str] = None
    range: Optional[Range] = Field(
        default=None, description="Source span, absent for unanchored definitions"
    )

    model_config = {"frozen": True, "extra": "forbid"}


class ResolvedReference(BaseModel):
    """A wiki link resolved against the workspace into a concrete target."""

    label: str
    target: str
    title: Optional[str] = None

    model_config = {"frozen": True, "extra": "forbid"}


class Document(BaseModel):
    """Everything the janitor needs to know about one note."""

    text: str
    eol: str = "\n"
    content_start: Position = Field(default_factory=lambda: Position(line=1, character=0))
    end: Position
    title: Optional[str] = Field(
        default=None, description="Authored title; never defaulted from the filename"
    )
    identifier: str
    existing_definitions: List[LinkDefinition] = Field(default_factory=list)
    resolved_references: List[ResolvedReference] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "forbid"}

    def with_references(self, references: List[ResolvedReference]) -> "Document":
        """Return a copy of this document carrying ``references``."""
        return self.model_copy(update={"resolved_references": list(references)})
