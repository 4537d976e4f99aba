"""
Slug generation for note identifiers and filenames.

Slugs are lowercase, punctuation-free and hyphenated:
    "My File"       ->  "my-file"
    "Über  Notes!"  ->  "über-notes"

A ``Slugger`` remembers every slug it has handed out and disambiguates
repeats with ``-1``, ``-2``, ... suffixes. Create one per batch (one
directory, one document); a shared instance would leak suffixes between
unrelated runs.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Optional

_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-{2,}")


def _is_permitted(char: str) -> bool:
    if char.isalnum() or char in "-_":
        return True
    # Letters without a case mapping (CJK, marks on letters) still count
    return unicodedata.category(char)[0] in ("L", "M")


def slugify(text: str) -> str:
    """Convert text to a slug without collision tracking.

    1. Lowercase
    2. Drop characters other than letters, digits, ``_``, ``-`` and whitespace
    3. Collapse whitespace runs into a single hyphen
    4. Collapse hyphen runs
    5. Strip leading/trailing hyphens
    """
    lowered = text.lower()
    kept = "".join(c for c in lowered if c.isspace() or _is_permitted(c))
    hyphenated = _WHITESPACE.sub("-", kept.strip())
    return _HYPHENS.sub("-", hyphenated).strip("-")


@dataclass
class Slugger:
    """Stateful slugger that disambiguates repeated slugs within one batch."""

    _seen: Dict[str, int] = field(default_factory=dict)

    def slug(self, text: str) -> str:
        """Generate a slug unique among those produced by this instance."""
        base = slugify(text)
        candidate = base
        while candidate in self._seen:
            self._seen[base] += 1
            candidate = f"{base}-{self._seen[base]}"
        self._seen.setdefault(candidate, 0)
        return candidate

    def canonicalize(self, filename: str) -> Optional[str]:
        """Return the canonical form of ``filename``, or None if already canonical.

        The stem is slugged and the extension kept (lowercased), so
        ``"My File.md"`` becomes ``"my-file.md"``.
        """
        path = PurePosixPath(filename)
        suffix = path.suffix.lower() if path.suffix.strip(".") else ""
        stem = path.name[: len(path.name) - len(path.suffix)] if suffix else path.name
        slug = self.slug(stem)
        if not slug:
            return None
        canonical = f"{slug}{suffix}"
        return None if canonical == filename else canonical

    def reset(self) -> None:
        """Forget every slug handed out so far."""
        self._seen.clear()
