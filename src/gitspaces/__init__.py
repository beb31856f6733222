from .config import ConfigStore, Scope, FileConfigBackend, GitConfigBackend, MemoryConfigBackend
from .paths import Layout, sanitize_name, expand_home
from .targets import Target, resolve_target
from .exceptions import (
    SpacesError, GitError, ConfigError, TargetNotFoundError, UnsafeRemovalError, HookError,
)
from .copy import copy_files, copy_directories, is_unsafe_pattern, parse_pattern_file
from .copy import CopyReport, CopyEntry, CopyWarning, PatternMatch, EntryKind
from .lifecycle import create_space, remove_space, seed_space, check_removable

__all__ = [
    "ConfigStore", "Scope", "FileConfigBackend", "GitConfigBackend", "MemoryConfigBackend",
    "Layout", "sanitize_name", "expand_home", "Target", "resolve_target",
    "SpacesError", "GitError", "ConfigError", "TargetNotFoundError",
    "UnsafeRemovalError", "HookError",
    "copy_files", "copy_directories", "is_unsafe_pattern", "parse_pattern_file",
    "CopyReport", "CopyEntry", "CopyWarning", "PatternMatch", "EntryKind",
    "create_space", "remove_space", "seed_space", "check_removable",
]
