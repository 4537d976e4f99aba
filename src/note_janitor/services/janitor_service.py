"""Service layer running the janitor over a notes workspace."""

import logging
import os
import tempfile
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from note_janitor.config import JanitorConfig, config as default_config
from note_janitor.exceptions import ErrorCode, JanitorError, StorageError
from note_janitor.janitor.edits import apply_edits
from note_janitor.janitor.heading import generate_heading
from note_janitor.janitor.link_references import generate_link_references
from note_janitor.janitor.slugger import Slugger, slugify
from note_janitor.models.schema import Edit
from note_janitor.observability import timed_operation, traced
from note_janitor.storage.workspace import Note, NoteWorkspace

logger = logging.getLogger(__name__)


@dataclass
class JanitorResult:
    """What the janitor would do (or did) to one note."""

    note: Note
    heading_edit: Optional[Edit] = None
    references_edit: Optional[Edit] = None
    new_text: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.new_text is not None and self.new_text != self.note.parsed.document.text

    @property
    def edits(self) -> List[Edit]:
        return [e for e in (self.heading_edit, self.references_edit) if e is not None]


@dataclass
class JanitorReport:
    """Outcome of a batch run."""

    processed: int = 0
    changed: List[Path] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.changed)

    @property
    def ok(self) -> bool:
        return not self.failed


def write_atomic(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` via a temp file in the same directory."""
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StorageError(
            f"Failed to write note {path.name}",
            operation="write",
            path=str(path),
            code=ErrorCode.STORAGE_WRITE_FAILED,
            original_error=e,
        ) from e


class JanitorService:
    """Keeps the reference blocks and headings of a workspace's notes in sync."""

    def __init__(
        self,
        workspace: NoteWorkspace,
        config: Optional[JanitorConfig] = None,
    ):
        """Initialize the service.

        Args:
            workspace: Loaded note workspace to work on.
            config: Janitor settings; the global config when None.
        """
        self.workspace = workspace
        self.config = config or default_config

    def process_note(self, note: Note) -> JanitorResult:
        """Compute the edits for one note without touching the disk.

        Raises:
            MalformedBlockError: In strict mode, for damaged reference blocks.
        """
        with timed_operation("process_note", note=note.relative_path) as op:
            document = note.parsed.document
            result = JanitorResult(note=note)

            if self.config.generate_references:
                references = self.workspace.resolve_references(
                    note, include_extensions=self.config.include_extensions
                )
                result.references_edit = generate_link_references(
                    document.with_references(references),
                    strict=self.config.strict_blocks,
                )
            if self.config.generate_headings:
                result.heading_edit = generate_heading(document)

            if result.edits:
                result.new_text = apply_edits(document.text, result.edits, document.eol)
            op["changed"] = result.changed
            return result

    @traced("janitor_run")
    def run(self, dry_run: bool = False) -> JanitorReport:
        """Process every note in the workspace.

        Changed notes are written back unless ``dry_run``. A failing note
        is recorded in the report and the run moves on.
        """
        report = JanitorReport()
        for note in self.workspace:
            report.processed += 1
            try:
                result = self.process_note(note)
                if not result.changed:
                    continue
                report.changed.append(note.path)
                if dry_run:
                    logger.info(f"Would update {note.relative_path}")
                    continue
                write_atomic(note.path, result.new_text)
                report.written.append(note.path)
                logger.info(f"Updated {note.relative_path}")
            except JanitorError as e:
                logger.error(f"Failed to process {note.relative_path}: {e}")
                report.failed[note.path] = str(e)

        logger.info(
            f"Janitor run complete: {report.processed} notes, "
            f"{len(report.changed)} changed, {len(report.failed)} failed"
            + (" (dry run)" if dry_run else "")
        )
        return report

    @traced("canonicalize_filenames")
    def canonicalize_filenames(self, dry_run: bool = False) -> List[Tuple[Path, Path]]:
        """Rename notes to their slugged, kebab-case filenames.

        Each directory gets its own Slugger. Names that are already
        canonical are claimed first, so they never pick up a suffix.

        Returns:
            (old, new) path pairs, renamed or, with ``dry_run``, to be renamed.

        Raises:
            StorageError: If a rename fails or would overwrite another file.
        """
        by_directory: Dict[Path, List[Path]] = defaultdict(list)
        for note in self.workspace:
            by_directory[note.path.parent].append(note.path)

        renames: List[Tuple[Path, Path]] = []
        for directory, paths in sorted(by_directory.items()):
            slugger = Slugger()
            pending = []
            for path in sorted(paths):
                if slugify(path.stem) == path.stem and path.suffix == path.suffix.lower():
                    slugger.slug(path.stem)
                else:
                    pending.append(path)
            for path in pending:
                canonical = slugger.canonicalize(path.name)
                if canonical is None:
                    continue
                renames.append((path, directory / canonical))

        for old, new in renames:
            if dry_run:
                logger.info(f"Would rename {old.name} -> {new.name}")
                continue
            self._rename(old, new)
        return renames

    @staticmethod
    def _rename(old: Path, new: Path) -> None:
        if new.exists():
            raise StorageError(
                f"Refusing to overwrite {new.name} while renaming {old.name}",
                operation="rename",
                path=str(new),
                code=ErrorCode.STORAGE_RENAME_FAILED,
            )
        try:
            old.rename(new)
        except OSError as e:
            raise StorageError(
                f"Failed to rename {old.name}",
                operation="rename",
                path=str(old),
                code=ErrorCode.STORAGE_RENAME_FAILED,
                original_error=e,
            ) from e
        logger.info(f"Renamed {old.name} -> {new.name}")
