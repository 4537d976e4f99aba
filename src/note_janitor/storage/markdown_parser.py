"""Markdown parsing for notes.

Turns raw note text into a ``Document`` plus the wiki links it contains.
Only front matter, the authored title, the trailing run of reference
definitions and ``[[wiki links]]`` are recognised. Fenced code blocks and
inline code are skipped while looking for them.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

import frontmatter
import yaml

from note_janitor.janitor.edits import end_position
from note_janitor.janitor.formatter import parse_label, parse_title
from note_janitor.models.schema import Document, LinkDefinition, Position, Range

logger = logging.getLogger(__name__)

_FRONTMATTER = re.compile(
    r"\A---[ \t]*\r?\n(?:.*?\r?\n)?---[ \t]*(?=\r?\n|\Z)", re.DOTALL
)
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_H1 = re.compile(r"^ {0,3}#[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_DEFINITION = re.compile(
    r"^(?P<indent> {0,3})\[(?P<label>(?:[^\[\]\\]|\\.)+)\]:[ \t]*"
    r"(?P<target><[^<>\r\n]*>|\S+)"
    r"(?:[ \t]+(?:\"(?P<dq>(?:[^\"\\]|\\.)*)\"|'(?P<sq>[^']*)'|\((?P<pq>[^()]*)\)))?"
    r"[ \t]*$"
)
_WIKILINK = re.compile(r"(?<!!)\[\[([^\[\]\r\n]+?)\]\]")
_INLINE_CODE = re.compile(r"(`+)(?:(?!\1).)+?\1")


@dataclass(frozen=True)
class WikiLink:
    """A ``[[target#section|alias]]`` link as written in a note."""

    raw: str
    target: str
    section: Optional[str] = None
    alias: Optional[str] = None
    line: int = 1

    @classmethod
    def from_raw(cls, raw: str, line: int = 1) -> "WikiLink":
        target, _, alias = raw.partition("|")
        target, _, section = target.partition("#")
        return cls(
            raw=raw,
            target=target.strip(),
            section=section.strip() or None,
            alias=alias.strip() or None,
            line=line,
        )


@dataclass(frozen=True)
class ParsedNote:
    """A parsed note: its document, its wiki links and its front matter."""

    document: Document
    links: List[WikiLink] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


def detect_eol(text: str) -> str:
    """Return the line ending used by ``text`` (``\\r\\n`` wins when present)."""
    return "\r\n" if "\r\n" in text else "\n"


def _offset_to_position(text: str, offset: int, eol: str) -> Position:
    before = text[:offset].split(eol)
    return Position(line=len(before), character=len(before[-1]))


def _fenced_lines(lines: List[str]) -> Set[int]:
    """0-based indexes of lines inside (or delimiting) fenced code blocks."""
    fenced: Set[int] = set()
    opener: Optional[str] = None
    for index, line in enumerate(lines):
        match = _FENCE.match(line)
        if opener is None:
            if match:
                opener = match.group(1)
                fenced.add(index)
            continue
        fenced.add(index)
        if match and match.group(1)[0] == opener[0] and len(match.group(1)) >= len(opener):
            opener = None
    return fenced


class MarkdownParser:
    """Parses note text into janitor documents."""

    def parse(
        self, text: str, identifier: str, eol: Optional[str] = None
    ) -> ParsedNote:
        """Parse a note.

        Args:
            text: Raw note content.
            identifier: Stable note name, usually the file stem.
            eol: Line ending to use; detected from ``text`` when omitted.

        Returns:
            The parsed note. Its document carries no resolved references;
            those come from the workspace.
        """
        eol = eol or detect_eol(text)
        lines = text.split(eol)

        metadata: Dict[str, Any] = {}
        content_start = Position(line=1, character=0)
        match = _FRONTMATTER.match(text)
        first_body_index = 0
        if match:
            # Content starts on the line after the closing fence
            offset = match.end()
            if text.startswith(eol, offset):
                offset += len(eol)
            content_start = _offset_to_position(text, offset, eol)
            first_body_index = text[: match.end()].count(eol) + 1
            metadata = self._load_metadata(text, identifier)

        fenced = _fenced_lines(lines)
        definitions, definitions_index = self._parse_trailing_definitions(
            lines, first_body_index, fenced
        )
        body_indexes = range(first_body_index, definitions_index)

        document = Document(
            text=text,
            eol=eol,
            content_start=content_start,
            end=end_position(text, eol),
            title=self._find_title(metadata, lines, body_indexes, fenced),
            identifier=identifier,
            existing_definitions=definitions,
        )
        return ParsedNote(
            document=document,
            links=self._find_wikilinks(lines, body_indexes, fenced),
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_metadata(text: str, identifier: str) -> Dict[str, Any]:
        try:
            metadata = frontmatter.loads(text).metadata
        except (yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable front matter in {identifier}: {e}")
            return {}
        return dict(metadata) if isinstance(metadata, dict) else {}

    @staticmethod
    def _find_title(
        metadata: Dict[str, Any],
        lines: List[str],
        body_indexes: range,
        fenced: Set[int],
    ) -> Optional[str]:
        """Front matter ``title`` first, then the first ``# `` heading."""
        title = metadata.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
        for index in body_indexes:
            if index in fenced:
                continue
            heading = _H1.match(lines[index])
            if heading:
                return heading.group(1).strip()
        return None

    @staticmethod
    def _parse_trailing_definitions(
        lines: List[str], first_body_index: int, fenced: Set[int]
    ) -> Tuple[List[LinkDefinition], int]:
        """Collect the definitions at the end of the note.

        Walks backwards over blank and definition lines; the first line of
        any other kind ends the run. Returns the definitions in document
        order and the index of the first line of the run.
        """
        collected: List[LinkDefinition] = []
        run_start = len(lines)
        index = len(lines) - 1
        while index >= first_body_index and index not in fenced:
            line = lines[index]
            if not line.strip():
                index -= 1
                continue
            match = _DEFINITION.match(line)
            if not match:
                break
            target = match.group("target")
            if target.startswith("<") and target.endswith(">"):
                target = target[1:-1]
            title = match.group("dq")
            if title is not None:
                title = parse_title(title)
            else:
                title = match.group("sq") if match.group("sq") is not None else match.group("pq")
            line_no = index + 1
            collected.append(
                LinkDefinition(
                    label=parse_label(match.group("label").strip()),
                    target=target,
                    title=title or None,
                    range=Range.create_from_position(
                        Position(line=line_no, character=len(match.group("indent"))),
                        Position(line=line_no, character=len(line)),
                    ),
                )
            )
            run_start = index
            index -= 1
        collected.reverse()
        return collected, run_start

    @staticmethod
    def _find_wikilinks(
        lines: List[str], body_indexes: range, fenced: Set[int]
    ) -> List[WikiLink]:
        links: List[WikiLink] = []
        for index in body_indexes:
            if index in fenced:
                continue
            line = _INLINE_CODE.sub(lambda m: " " * len(m.group(0)), lines[index])
            for match in _WIKILINK.finditer(line):
                link = WikiLink.from_raw(match.group(1), line=index + 1)
                if link.target:
                    links.append(link)
        return links
