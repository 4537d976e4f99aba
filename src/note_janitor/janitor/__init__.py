"""Core janitor operations: reference block sync, headings, slugs and edits."""

from note_janitor.janitor.edits import apply_edit, apply_edits, end_position
from note_janitor.janitor.formatter import (
    LINK_REFERENCE_DEFINITION_FOOTER,
    LINK_REFERENCE_DEFINITION_HEADER,
    build_block,
    stringify,
)
from note_janitor.janitor.heading import generate_heading
from note_janitor.janitor.link_references import generate_link_references
from note_janitor.janitor.slugger import Slugger, slugify

__all__ = [
    "LINK_REFERENCE_DEFINITION_FOOTER",
    "LINK_REFERENCE_DEFINITION_HEADER",
    "Slugger",
    "apply_edit",
    "apply_edits",
    "build_block",
    "end_position",
    "generate_heading",
    "generate_link_references",
    "slugify",
    "stringify",
]
