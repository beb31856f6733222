"""Data structures for copy operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class EntryKind(str, Enum):
    """Kind of copied entry: ``FILE`` or ``DIRECTORY``."""
    FILE = "file"
    DIRECTORY = "directory"

    def __str__(self) -> str:          # noqa: D105
        return self.value


@dataclass
class CopyEntry:
    """One file or directory selected for copying.

    Attributes:
        path: Path relative to both roots (forward slashes).
        kind: :class:`EntryKind` of the entry.
        src: Absolute source path.
    """
    path: str
    kind: EntryKind
    src: str | None = None


@dataclass
class PatternMatch:
    """How many entries an include pattern contributed."""
    pattern: str
    matched: int


@dataclass
class CopyWarning:
    """A non-fatal problem: an unsafe pattern or a symlink that could not be made."""
    subject: str
    message: str


@dataclass
class CopyReport:
    """Result of :func:`copy_files` or :func:`copy_directories`.

    A dry run selects exactly the same entries as a real run over the same
    tree; only the filesystem writes are skipped.

    Attributes:
        dry_run: True if nothing was written.
        copied: Entries copied (or that would be copied), in order.
        patterns: Per-include-pattern match counts, in pattern order.
        warnings: Skipped unsafe patterns and failed symlinks.
    """
    dry_run: bool = False
    copied: list[CopyEntry] = field(default_factory=list)
    patterns: list[PatternMatch] = field(default_factory=list)
    warnings: list[CopyWarning] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of entries copied (or that would be copied)."""
        return len(self.copied)

    def paths(self) -> list[str]:
        return [e.path for e in self.copied]
