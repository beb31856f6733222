"""File and directory copy operations."""

from __future__ import annotations

import os
import shutil

from ._resolve import _plan_directories, _plan_files, _walk_tree
from ._types import CopyEntry, CopyReport, CopyWarning, EntryKind


def copy_files(
    src_root: str | os.PathLike,
    dst_root: str | os.PathLike,
    includes: list[str],
    excludes: list[str],
    *,
    dry_run: bool = False,
) -> CopyReport:
    """Copy files matching *includes* from *src_root* to *dst_root*.

    Each file lands at the same relative path under *dst_root*, with
    missing parent directories created.  With *dry_run* nothing is written
    but the report lists exactly what a real run would copy.
    """
    report = CopyReport(dry_run=dry_run)
    if not includes:
        return report
    src_root, dst_root = os.fspath(src_root), os.fspath(dst_root)
    for rel, full in _plan_files(src_root, includes, excludes, report):
        if not dry_run:
            dest = os.path.join(dst_root, rel)
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            shutil.copy(full, dest)
        report.copied.append(CopyEntry(rel, EntryKind.FILE, src=full))
    return report


def copy_directories(
    src_root: str | os.PathLike,
    dst_root: str | os.PathLike,
    includes: list[str],
    excludes: list[str],
    *,
    dry_run: bool = False,
) -> CopyReport:
    """Copy whole directories whose basename matches one of *includes*.

    Directories are found anywhere under *src_root* and recreated at the
    same relative location under *dst_root*, including their files and
    symlinks.  *excludes* are matched against paths relative to
    *src_root* when selecting directories and relative to each matched
    directory when copying its contents.
    """
    report = CopyReport(dry_run=dry_run)
    if not includes:
        return report
    src_root, dst_root = os.fspath(src_root), os.fspath(dst_root)
    pairs, safe_excludes = _plan_directories(src_root, includes, excludes, report)
    for rel, full in pairs:
        if not dry_run:
            _copy_tree(full, os.path.join(dst_root, rel), safe_excludes, report)
        report.copied.append(CopyEntry(rel, EntryKind.DIRECTORY, src=full))
    return report


def _copy_tree(src: str, dst: str, excludes: list[str], report: CopyReport) -> None:
    """Recursively copy *src* into *dst*, recreating symlinks where possible."""
    os.makedirs(dst, exist_ok=True)
    for rel, kind in _walk_tree(src, excludes):
        source = os.path.join(src, rel)
        target = os.path.join(dst, rel)
        if kind == "dir":
            os.makedirs(target, exist_ok=True)
        elif kind == "file":
            os.makedirs(os.path.dirname(target), exist_ok=True)
            shutil.copy(source, target)
        else:
            _copy_symlink(source, target, rel, report)


def _copy_symlink(source: str, target: str, rel: str, report: CopyReport) -> None:
    """Recreate the symlink at *source* as *target* (best effort)."""
    link = os.readlink(source)
    if os.path.islink(target) and os.readlink(target) == link:
        return
    try:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        os.symlink(link, target)
    except OSError as exc:
        report.warnings.append(CopyWarning(rel, f"Could not recreate symlink {rel}: {exc}"))
