"""Reference-definition formatting.

Renders resolved references and parsed definitions into the single-line
form ``[label]: target "title"`` and builds the sentinel-wrapped block:

    [//begin]: # "Autogenerated link references for markdown compatibility"
    [note-a]: note-a "Note A"
    [//end]: # "Autogenerated link references"

The sentinel lines are matched byte for byte by older notes, so they must
never change.
"""

import re
from typing import Iterable, Sequence, Union

from note_janitor.models.schema import LinkDefinition, ResolvedReference

BEGIN_LABEL = "//begin"
END_LABEL = "//end"

LINK_REFERENCE_DEFINITION_HEADER = (
    '[//begin]: # "Autogenerated link references for markdown compatibility"'
)
LINK_REFERENCE_DEFINITION_FOOTER = '[//end]: # "Autogenerated link references"'

SENTINEL_LABELS = frozenset({BEGIN_LABEL, END_LABEL})

Definition = Union[LinkDefinition, ResolvedReference]

# A backslash is only escaped where a reader would take it for an escape
_LABEL_SPECIAL = re.compile(r"\\(?=[\\\[\]]|\Z)|[\[\]]")
_LABEL_ESCAPE = re.compile(r"\\([\\\[\]])")
_TITLE_SPECIAL = re.compile(r"\\(?=[\\\"]|\Z)|\"")
_TITLE_ESCAPE = re.compile(r"\\([\\\"])")
_LINE_BREAKS = re.compile(r"[ \t]*[\r\n]+[ \t]*")


def format_target(target: str) -> str:
    """Wrap targets containing spaces in angle brackets."""
    if " " in target and not (target.startswith("<") and target.endswith(">")):
        return f"<{target}>"
    return target


def format_label(label: str) -> str:
    """Escape brackets, and backslashes that would read as escapes, in a label."""
    return _LABEL_SPECIAL.sub(lambda m: "\\" + m.group(0), label)


def parse_label(text: str) -> str:
    """Inverse of ``format_label``."""
    return _LABEL_ESCAPE.sub(r"\1", text)


def format_title(title: str) -> str:
    """Double-quote a title on a single line, escaping quotes inside it."""
    flat = _LINE_BREAKS.sub(" ", title)
    escaped = _TITLE_SPECIAL.sub(lambda m: "\\" + m.group(0), flat)
    return f'"{escaped}"'


def parse_title(text: str) -> str:
    """Inverse of ``format_title`` for the text between the quotes."""
    return _TITLE_ESCAPE.sub(r"\1", text)


def stringify(definition: Definition) -> str:
    """Render one definition as a reference-definition line."""
    text = f"[{format_label(definition.label)}]: {format_target(definition.target)}"
    if definition.title:
        text = f"{text} {format_title(definition.title)}"
    return text


def join_definitions(definitions: Iterable[Definition], eol: str) -> str:
    """Stringify ``definitions`` and join them with ``eol``."""
    return eol.join(stringify(d) for d in definitions)


def build_block(references: Sequence[ResolvedReference], eol: str) -> str:
    """Build the sentinel-wrapped block, or ``""`` when there is nothing to list."""
    if not references:
        return ""
    return eol.join(
        [
            LINK_REFERENCE_DEFINITION_HEADER,
            *(stringify(r) for r in references),
            LINK_REFERENCE_DEFINITION_FOOTER,
        ]
    )


def is_sentinel(definition: Definition) -> bool:
    return definition.label in SENTINEL_LABELS
