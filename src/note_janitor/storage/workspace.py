"""The note workspace: every note under a directory and the links between them.

Resolves a note's wiki links into concrete reference targets. Links to
notes that do not exist are placeholders and produce no reference.
"""
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from note_janitor.exceptions import ConfigurationError, DocumentParseError, StorageError
from note_janitor.janitor.slugger import slugify
from note_janitor.models.schema import ResolvedReference
from note_janitor.storage.markdown_parser import MarkdownParser, ParsedNote, WikiLink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Note:
    """A note on disk together with its parsed content."""

    path: Path
    relative_path: str  # posix, relative to the workspace root, with extension
    parsed: ParsedNote

    @property
    def identifier(self) -> str:
        return self.path.stem

    @property
    def title(self) -> Optional[str]:
        return self.parsed.document.title

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.relative_path)


def read_note_text(path: Path) -> str:
    """Read a note, keeping its line endings untouched."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise DocumentParseError(
            f"Note is not valid UTF-8: {path.name}", path=str(path), original_error=e
        ) from e
    except OSError as e:
        raise StorageError(
            f"Failed to read note {path.name}",
            operation="read",
            path=str(path),
            original_error=e,
        ) from e


class NoteWorkspace:
    """All notes below ``notes_dir``, indexed for wiki-link lookup."""

    def __init__(
        self,
        notes_dir: Path,
        extension: str = ".md",
        parser: Optional[MarkdownParser] = None,
    ) -> None:
        self.notes_dir = Path(notes_dir)
        self.extension = extension.lower()
        self.parser = parser or MarkdownParser()
        self._notes: Dict[str, Note] = {}
        self._index: Dict[str, Note] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> "NoteWorkspace":
        """Scan the notes directory and parse every note.

        Notes that cannot be read are logged and left out; they are then
        treated like any other missing note.

        Raises:
            ConfigurationError: If the notes directory does not exist.
        """
        if not self.notes_dir.is_dir():
            raise ConfigurationError(
                f"Notes directory does not exist: {self.notes_dir}",
                config_key="notes_dir",
            )
        self._notes.clear()
        self._index.clear()

        skipped = 0
        for path in self._note_paths():
            try:
                self.add(path, read_note_text(path))
            except (DocumentParseError, StorageError) as e:
                logger.warning(f"Skipping note {path.name}: {e}")
                skipped += 1
        logger.info(f"Loaded {len(self._notes)} notes from {self.notes_dir} ({skipped} skipped)")
        return self

    def add(self, path: Path, text: str) -> Note:
        """Parse ``text`` as the note at ``path`` and index it."""
        path = Path(path)
        relative = path.relative_to(self.notes_dir).as_posix()
        note = Note(
            path=path,
            relative_path=relative,
            parsed=self.parser.parse(text, identifier=path.stem),
        )
        self._notes[relative] = note
        for key in self._keys_for(relative):
            # First note wins for ambiguous short names
            self._index.setdefault(key, note)
        self._index[self._strip_extension(relative).lower()] = note
        return note

    def _note_paths(self) -> List[Path]:
        return sorted(
            p
            for p in self.notes_dir.rglob(f"*{self.extension}")
            if p.is_file()
            and not any(part.startswith(".") for part in p.relative_to(self.notes_dir).parts)
        )

    def _strip_extension(self, name: str) -> str:
        if name.lower().endswith(self.extension):
            return name[: -len(self.extension)]
        return name

    def _keys_for(self, relative: str) -> List[str]:
        stem = posixpath.basename(self._strip_extension(relative))
        return [stem.lower(), slugify(stem)]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Note]:
        return iter(self._notes.values())

    def __len__(self) -> int:
        return len(self._notes)

    def get(self, relative_path: str) -> Optional[Note]:
        return self._notes.get(relative_path)

    def find(self, name: str) -> Optional[Note]:
        """Look a note up by relative path, stem or slug (case-insensitive)."""
        key = self._strip_extension(name.strip().lstrip("/")).lower()
        if not key:
            return None
        return self._index.get(key) or self._index.get(slugify(posixpath.basename(key)))

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    def resolve_link(
        self, source: Note, link: WikiLink, include_extensions: bool = False
    ) -> Optional[ResolvedReference]:
        """Resolve one wiki link of ``source``; None for placeholders."""
        target = self.find(link.target)
        if target is None:
            logger.debug(f"{source.relative_path}: [[{link.raw}]] is a placeholder")
            return None

        relative = posixpath.relpath(target.relative_path, source.directory or ".")
        if not include_extensions:
            relative = self._strip_extension(relative)
        if link.section:
            relative = f"{relative}#{slugify(link.section)}"
        return ResolvedReference(label=link.raw, target=relative, title=target.title)

    def resolve_references(
        self, note: Note, include_extensions: bool = False
    ) -> List[ResolvedReference]:
        """Resolve every wiki link of ``note``, in order, one per label."""
        references: List[ResolvedReference] = []
        seen = set()
        for link in note.parsed.links:
            if link.raw in seen:
                continue
            reference = self.resolve_link(note, link, include_extensions)
            if reference is not None:
                seen.add(link.raw)
                references.append(reference)
        return references
