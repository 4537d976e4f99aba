#!/usr/bin/env python
"""Command line entry point for the note janitor."""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from note_janitor import __version__
from note_janitor.config import JanitorConfig, config
from note_janitor.exceptions import JanitorError
from note_janitor.observability import configure_logging, metrics
from note_janitor.services.janitor_service import JanitorService
from note_janitor.storage.workspace import NoteWorkspace

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHANGES = 1
EXIT_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="note-janitor",
        description=(
            "Sync the autogenerated link reference block and the top-level "
            "heading of every markdown note in a directory."
        ),
    )
    parser.add_argument(
        "--notes-dir",
        help="Directory holding the notes",
        type=str,
        default=os.environ.get("NOTE_JANITOR_NOTES_DIR")
    )
    parser.add_argument(
        "--dry-run",
        help="Report what would change without writing anything",
        action="store_true",
    )
    parser.add_argument(
        "--check",
        help="Like --dry-run, but exit with status 1 when any note would change",
        action="store_true",
    )
    parser.add_argument(
        "--include-extensions",
        help="Keep the note extension in generated reference targets",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--no-headings",
        help="Do not add missing headings",
        action="store_true",
    )
    parser.add_argument(
        "--no-references",
        help="Do not maintain the link reference block",
        action="store_true",
    )
    parser.add_argument(
        "--kebab-case-filenames",
        help="Rename notes to slugged, kebab-case filenames",
        action="store_true",
    )
    parser.add_argument(
        "--strict",
        help="Fail on malformed //begin ... //end blocks instead of skipping them",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
    )
    parser.add_argument(
        "--log-dir",
        help="Also write rotating log files to this directory",
        type=str,
        default=None,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def update_config(args: argparse.Namespace, base: JanitorConfig = config) -> JanitorConfig:
    """Return a copy of ``base`` with command line overrides applied."""
    cfg = base.model_copy()
    if args.notes_dir:
        cfg.notes_dir = Path(args.notes_dir)
    if args.include_extensions is not None:
        cfg.include_extensions = args.include_extensions
    if args.no_headings:
        cfg.generate_headings = False
    if args.no_references:
        cfg.generate_references = False
    if args.strict is not None:
        cfg.strict_blocks = args.strict
    if args.log_level:
        cfg.log_level = args.log_level
    if args.log_dir:
        cfg.log_dir = Path(args.log_dir)
    return cfg


def _load_workspace(cfg: JanitorConfig) -> NoteWorkspace:
    return NoteWorkspace(cfg.get_notes_dir(), extension=cfg.extension).load()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the janitor over a notes directory."""
    args = parse_args(argv)
    try:
        cfg = update_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        configure_logging(level=getattr(logging, cfg.log_level), log_dir=cfg.log_dir)
    except OSError as e:
        # Fall back to console logging if the log directory is unusable
        logging.basicConfig(level=cfg.log_level)
        logger.warning(f"Failed to configure file logging: {e}")

    dry_run = args.dry_run or args.check
    try:
        workspace = _load_workspace(cfg)
        service = JanitorService(workspace, cfg)
        report = service.run(dry_run=dry_run)

        renames = []
        if args.kebab_case_filenames:
            renames = service.canonicalize_filenames(dry_run=dry_run)
            if renames and not dry_run:
                # Reference targets point at the old names until refreshed
                refreshed = JanitorService(_load_workspace(cfg), cfg).run(dry_run=False)
                report.changed.extend(
                    [p for p in refreshed.changed if p not in report.changed]
                )
                report.failed.update(refreshed.failed)
    except JanitorError as e:
        logger.error(f"Janitor run aborted: {e}")
        return EXIT_ERROR

    logger.debug(f"Metrics: {metrics.get_metrics()}")
    for path in report.changed:
        print(f"{'would update' if dry_run else 'updated'}: {path}")
    for old, new in renames:
        print(f"{'would rename' if dry_run else 'renamed'}: {old} -> {new.name}")

    if not report.ok:
        return EXIT_CHANGES
    if args.check and (report.changed or renames):
        return EXIT_CHANGES
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
