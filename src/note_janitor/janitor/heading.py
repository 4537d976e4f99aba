"""Heading synthesis for notes without a title."""

import logging
from typing import Optional

from note_janitor.janitor.slugger import slugify
from note_janitor.models.schema import Document, Edit, Range

logger = logging.getLogger(__name__)


def title_case(text: str) -> str:
    """Capitalize the first letter of every word, leaving the rest alone."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split())


def heading_from_identifier(identifier: str) -> str:
    """Turn a note identifier into heading text: ``"my-file"`` -> ``"My File"``."""
    return title_case(slugify(identifier).replace("-", " ").replace("_", " "))


def generate_heading(doc: Optional[Document]) -> Optional[Edit]:
    """Compute the edit inserting ``# Title`` at the start of the content.

    With front matter, ``doc.content_start`` is the start of the line after
    the closing fence, and the heading always ends up separated from both
    the fence and the body by one blank line.
    """
    if doc is None or doc.title:
        return None

    eol = doc.eol
    start = doc.content_start
    frontmatter_exists = start.line != 1

    blank_line_after_frontmatter = False
    if frontmatter_exists:
        lines = doc.text.split(eol)
        blank_line_after_frontmatter = lines[start.line - 1] == ""

    heading = heading_from_identifier(doc.identifier)
    if not heading:
        logger.debug(f"No heading text derivable from identifier {doc.identifier!r}")
        return None

    padding_start = eol if frontmatter_exists else ""
    if start.character != 0:
        # Front matter closes at the end of the file, without a line break
        padding_start = eol + eol
    padding_end = eol if blank_line_after_frontmatter else eol + eol
    return Edit(
        range=Range.create_from_position(start),
        new_text=f"{padding_start}# {heading}{padding_end}",
    )
