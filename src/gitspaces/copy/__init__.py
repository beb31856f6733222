"""Pattern-driven copying of files and directories between spaces.

Include patterns are globs rooted at the source space; exclude patterns
are matched against the relative path.  Patterns that could escape the
root (absolute paths or ``..`` segments) are skipped with a warning.
"""

from ._types import (
    CopyEntry,
    CopyReport,
    CopyWarning,
    EntryKind,
    PatternMatch,
)
from ._resolve import (
    parse_pattern_file,
    is_unsafe_pattern,
    _expand_disk_glob,
)
from ._ops import (
    copy_files,
    copy_directories,
)

__all__ = [
    # Public types
    "CopyEntry", "CopyReport", "CopyWarning", "EntryKind", "PatternMatch",
    # Public functions
    "copy_files", "copy_directories",
    "parse_pattern_file", "is_unsafe_pattern",
    # Private but used by tests
    "_expand_disk_glob",
]
