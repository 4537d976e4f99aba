"""Synchronization of the autogenerated link reference block.

Given a document's existing reference definitions and the references its
wiki links resolve to, compute the single edit (if any) that brings the
trailing definitions in line:

- definitions between ``[//begin]`` and ``[//end]`` belong to the janitor
  and are regenerated;
- every other definition was written by hand and is kept, in order;
- running the janitor on its own output never produces another edit.

The no-op/edit decision is made by an ordered table of named rules over
a small merge state, so each outcome can be traced to exactly one rule.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from note_janitor.exceptions import MalformedBlockError
from note_janitor.janitor.formatter import (
    BEGIN_LABEL,
    END_LABEL,
    build_block,
    is_sentinel,
    join_definitions,
)
from note_janitor.models.schema import Document, Edit, LinkDefinition, Range

logger = logging.getLogger(__name__)


class BlockState(str, enum.Enum):
    """Outcome of looking for the autogenerated block among the definitions."""

    FOUND = "found"
    NO_BLOCK = "no_block"
    BEGIN_MISSING = "begin_missing"
    END_MISSING = "end_missing"
    OUT_OF_ORDER = "out_of_order"

    @property
    def is_malformed(self) -> bool:
        return self not in (BlockState.FOUND, BlockState.NO_BLOCK)


@dataclass(frozen=True)
class BlockLookup:
    """Where the autogenerated block sits, when there is a well-formed one.

    ``begin`` and ``end`` are inclusive indexes into the definitions and are
    only set for ``BlockState.FOUND``.
    """

    state: BlockState
    begin: Optional[int] = None
    end: Optional[int] = None

    def manual(self, definitions: Sequence[LinkDefinition]) -> List[LinkDefinition]:
        """The hand-written definitions: everything outside the block.

        Without a well-formed block every definition is hand-written. Sentinel
        lines outside the block are dropped either way: they belong to the
        janitor and re-emitting them would nest blocks.
        """
        if self.state is BlockState.FOUND:
            rest = list(definitions[: self.begin]) + list(definitions[self.end + 1 :])
        else:
            rest = list(definitions)
        return [d for d in rest if not is_sentinel(d)]


def locate_generated_block(definitions: Sequence[LinkDefinition]) -> BlockLookup:
    """Find the span from the first ``//begin`` to the last ``//end``.

    Taking the last ``//end`` folds duplicated blocks left behind by older
    janitor versions into a single span.
    """
    labels = [d.label for d in definitions]
    begin = labels.index(BEGIN_LABEL) if BEGIN_LABEL in labels else None
    end = (
        len(labels) - 1 - labels[::-1].index(END_LABEL)
        if END_LABEL in labels
        else None
    )

    if begin is None and end is None:
        return BlockLookup(BlockState.NO_BLOCK)
    if begin is None:
        return BlockLookup(BlockState.BEGIN_MISSING)
    if end is None:
        return BlockLookup(BlockState.END_MISSING)
    if end < begin:
        return BlockLookup(BlockState.OUT_OF_ORDER)
    return BlockLookup(BlockState.FOUND, begin, end)


class Action(str, enum.Enum):
    NONE = "none"
    INSERT = "insert"
    REPLACE = "replace"


@dataclass(frozen=True)
class MergeState:
    """The facts the decision table looks at."""

    has_definitions: bool
    has_references: bool
    has_manual: bool
    begin_present: bool
    unchanged: bool


class Rule(NamedTuple):
    name: str
    applies: Callable[[MergeState], bool]
    action: Action


# First matching rule wins.
DECISION_TABLE: Tuple[Rule, ...] = (
    Rule(
        "NOTHING_TO_ADD",
        lambda s: not s.has_definitions and not s.has_references,
        Action.NONE,
    ),
    Rule(
        "INSERT_BLOCK",
        lambda s: not s.has_definitions,
        Action.INSERT,
    ),
    # Hand-written definitions, never a janitor block, no live links
    Rule(
        "MANUAL_ONLY",
        lambda s: s.has_manual and not s.begin_present and not s.has_references,
        Action.NONE,
    ),
    Rule(
        "UNCHANGED",
        lambda s: s.unchanged,
        Action.NONE,
    ),
    # No live links left: manual content is never wiped to make room
    Rule(
        "PRESERVE_MANUAL",
        lambda s: s.has_manual and not s.has_references,
        Action.NONE,
    ),
    Rule(
        "REPLACE_BLOCK",
        lambda s: True,
        Action.REPLACE,
    ),
)


def decide(state: MergeState) -> Rule:
    """Return the first rule of the decision table that applies to ``state``."""
    for rule in DECISION_TABLE:
        if rule.applies(state):
            return rule
    raise AssertionError("decision table has no catch-all rule")  # pragma: no cover


def _compose(manual: Sequence[LinkDefinition], block: str, eol: str) -> str:
    if manual and block:
        return f"{join_definitions(manual, eol)}{eol}{block}"
    return block


def generate_link_references(
    doc: Optional[Document], strict: bool = False
) -> Optional[Edit]:
    """Compute the edit that syncs the document's reference block.

    Args:
        doc: The document, with its existing definitions and the references
            its wiki links resolve to.
        strict: Raise MalformedBlockError for inconsistent sentinels instead
            of treating the block as absent.

    Returns:
        The edit to apply, or None when the document is already in sync.
    """
    if doc is None:
        return None

    eol = doc.eol
    definitions = doc.existing_definitions
    references = doc.resolved_references
    block = build_block(references, eol)

    lookup = BlockLookup(BlockState.NO_BLOCK)
    manual: List[LinkDefinition] = list(definitions)
    if definitions and references:
        lookup = locate_generated_block(definitions)
        if lookup.state.is_malformed:
            if strict:
                raise MalformedBlockError(lookup.state.value, identifier=doc.identifier)
            logger.warning(
                f"Ignoring malformed link reference block in {doc.identifier} "
                f"({lookup.state.value})"
            )
        manual = lookup.manual(definitions)

    old_text = join_definitions(definitions, eol)
    full_text = _compose(manual, block, eol)

    state = MergeState(
        has_definitions=bool(definitions),
        has_references=bool(references),
        has_manual=bool(manual),
        begin_present=any(d.label == BEGIN_LABEL for d in definitions),
        unchanged=bool(definitions) and old_text in (block, full_text),
    )
    rule = decide(state)
    logger.debug(f"{doc.identifier}: {rule.name} ({lookup.state.value})")

    if rule.action is Action.NONE:
        return None

    if rule.action is Action.INSERT:
        padding = eol if doc.end.character == 0 else eol + eol
        return Edit(
            range=Range.create_from_position(doc.end),
            new_text=f"{padding}{block}",
        )

    first, last = definitions[0], definitions[-1]
    if first.range is None or last.range is None:
        # Unanchored definitions cannot be replaced in place
        logger.warning(f"{doc.identifier}: existing definitions have no source range")
        return None
    return Edit(
        range=Range.create_from_position(first.range.start, last.range.end),
        new_text=full_text,
    )
