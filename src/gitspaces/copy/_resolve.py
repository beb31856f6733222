"""Pattern safety, glob expansion, and candidate selection."""

from __future__ import annotations

import os
from pathlib import Path

from .._glob import _glob_match, _has_magic
from ._types import CopyReport, CopyWarning, PatternMatch


# ---------------------------------------------------------------------------
# Pattern files and safety
# ---------------------------------------------------------------------------

def parse_pattern_file(path: str | os.PathLike) -> list[str]:
    """Read one pattern per line, skipping blanks and ``#`` comments.

    A missing file yields no patterns.
    """
    p = Path(path)
    if not p.exists():
        return []
    patterns: list[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


def is_unsafe_pattern(pattern: str) -> bool:
    """True if *pattern* could reach outside the root it is applied to.

    Backslashes count as separators here, so ``..\\x`` is unsafe too.
    """
    pattern = pattern.replace("\\", "/")
    return (
        pattern.startswith("/")
        or pattern == ".."
        or pattern.startswith("../")
        or "/../" in pattern
        or pattern.endswith("/..")
    )


def _safe_excludes(excludes: list[str], report: CopyReport) -> list[str]:
    """Drop unsafe exclude patterns, recording a warning for each."""
    safe: list[str] = []
    for pattern in excludes:
        if is_unsafe_pattern(pattern):
            report.warnings.append(
                CopyWarning(pattern, f"Skipping unsafe exclude pattern: {pattern}")
            )
            continue
        safe.append(pattern)
    return safe


def _check_include(pattern: str, report: CopyReport) -> bool:
    """Return False (and warn) if include *pattern* is unsafe."""
    if is_unsafe_pattern(pattern):
        report.warnings.append(CopyWarning(pattern, f"Skipping unsafe pattern: {pattern}"))
        return False
    return True


def _is_excluded(rel: str, excludes: list[str]) -> bool:
    return any(_glob_match(pattern, rel) for pattern in excludes)


def _rel(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


# ---------------------------------------------------------------------------
# Disk-side glob expansion
# ---------------------------------------------------------------------------

def _expand_disk_glob(root: str, pattern: str) -> list[str]:
    """Expand *pattern* under *root*, returning sorted relative paths.

    ``*``, ``?`` and ``[...]`` match within one path segment; a segment of
    exactly ``**`` matches zero or more directories.
    """
    segments = [s for s in pattern.rstrip("/").split("/") if s and s != "."]
    if not segments or ".." in segments:
        return []
    return sorted(set(_disk_glob_walk(root, segments, "")))


def _disk_glob_walk(root: str, segments: list[str], prefix: str) -> list[str]:
    seg = segments[0]
    rest = segments[1:]
    scan_dir = os.path.join(root, prefix) if prefix else root

    if seg == "**":
        results = _disk_glob_walk(root, rest, prefix) if rest else []
        try:
            entries = sorted(os.listdir(scan_dir))
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return results
        for name in entries:
            full = f"{prefix}/{name}" if prefix else name
            if not rest:
                results.append(full)
            abs_full = os.path.join(root, full)
            if os.path.isdir(abs_full) and not os.path.islink(abs_full):
                results.extend(_disk_glob_walk(root, segments, full))
        return results

    if _has_magic(seg):
        try:
            entries = sorted(os.listdir(scan_dir))
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return []
        results: list[str] = []
        for name in entries:
            if not _glob_match(seg, name):
                continue
            full = f"{prefix}/{name}" if prefix else name
            if rest:
                results.extend(_disk_glob_walk(root, rest, full))
            else:
                results.append(full)
        return results

    full = f"{prefix}/{seg}" if prefix else seg
    if rest:
        return _disk_glob_walk(root, rest, full)
    if os.path.lexists(os.path.join(root, full)):
        return [full]
    return []


# ---------------------------------------------------------------------------
# Candidate selection (shared by real and dry runs)
# ---------------------------------------------------------------------------

def _plan_files(
    src_root: str, includes: list[str], excludes: list[str], report: CopyReport,
) -> list[tuple[str, str]]:
    """Build ``(rel_path, abs_src)`` pairs for file-mode copy.

    Each include is globbed under *src_root*; only regular files survive.
    A path matching any exclude, or already selected by an earlier
    include, is skipped.
    """
    safe_excludes = _safe_excludes(excludes, report)
    seen: set[str] = set()
    pairs: list[tuple[str, str]] = []
    for pattern in includes:
        if not _check_include(pattern, report):
            continue
        normalized = pattern[2:] if pattern.startswith("./") else pattern
        matched = 0
        for rel in _expand_disk_glob(src_root, normalized):
            full = os.path.join(src_root, rel)
            if not os.path.isfile(full):
                continue
            if _is_excluded(rel, safe_excludes):
                continue
            if rel in seen:
                continue
            seen.add(rel)
            pairs.append((rel, full))
            matched += 1
        report.patterns.append(PatternMatch(pattern, matched))
    return pairs


def _find_directories(src_root: str, pattern: str, excludes: list[str]) -> list[str]:
    """Relative paths of directories under *src_root* whose basename matches.

    The walk is sorted and does not follow symlinks; a symlinked directory
    is never a match.  Matched directories are not descended into, since
    they are copied whole.
    """
    found: list[str] = []
    for dirpath, dirnames, _filenames in os.walk(src_root):
        dirnames.sort()
        descend: list[str] = []
        for name in dirnames:
            full = os.path.join(dirpath, name)
            if os.path.islink(full):
                continue
            rel = _rel(full, src_root)
            if _glob_match(pattern, name) and not _is_excluded(rel, excludes):
                found.append(rel)
                continue
            descend.append(name)
        dirnames[:] = descend
    return found


def _plan_directories(
    src_root: str, includes: list[str], excludes: list[str], report: CopyReport,
) -> tuple[list[tuple[str, str]], list[str]]:
    """Build ``(rel_path, abs_src)`` pairs for directory-mode copy.

    Returns the pairs and the safe exclude patterns (also applied inside
    each matched directory).
    """
    safe_excludes = _safe_excludes(excludes, report)
    seen: set[str] = set()
    pairs: list[tuple[str, str]] = []
    for pattern in includes:
        if not _check_include(pattern, report):
            continue
        matched = 0
        for rel in _find_directories(src_root, pattern, safe_excludes):
            if rel in seen:
                continue
            seen.add(rel)
            pairs.append((rel, os.path.join(src_root, rel)))
            matched += 1
        report.patterns.append(PatternMatch(pattern, matched))
    return pairs, safe_excludes


def _walk_tree(src_dir: str, excludes: list[str]) -> list[tuple[str, str]]:
    """List ``(rel_path, kind)`` entries inside *src_dir* for recursive copy.

    *kind* is ``"dir"``, ``"file"`` or ``"link"``.  The directory's own
    root is not an entry.  Excluded directories are pruned.
    """
    entries: list[tuple[str, str]] = []
    for dirpath, dirnames, filenames in os.walk(src_dir):
        dirnames.sort()
        descend: list[str] = []
        for name in dirnames:
            full = os.path.join(dirpath, name)
            rel = _rel(full, src_dir)
            if _is_excluded(rel, excludes):
                continue
            if os.path.islink(full):
                entries.append((rel, "link"))
                continue
            entries.append((rel, "dir"))
            descend.append(name)
        dirnames[:] = descend
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            rel = _rel(full, src_dir)
            if _is_excluded(rel, excludes):
                continue
            if os.path.islink(full):
                entries.append((rel, "link"))
            elif os.path.isfile(full):
                entries.append((rel, "file"))
    return entries
