"""Space lifecycle: create, remove, seed, and clean up.

These functions compose the path resolver, configuration store, copy
engine and hooks.  They report progress on stderr and raise
:class:`~gitspaces.exceptions.SpacesError` subclasses on failure.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from . import _git, _ui
from .clone import ClonePlan, create_clone
from .config import (
    ConfigStore,
    KEY_COPY_EXCLUDE,
    KEY_COPY_EXCLUDE_DIRS,
    KEY_COPY_INCLUDE,
    KEY_COPY_INCLUDE_DIRS,
    dedupe,
)
from .copy import CopyReport, copy_directories, copy_files, parse_pattern_file
from .exceptions import HookError, SpacesError, UnsafeRemovalError
from .hooks import POST_CREATE, POST_REMOVE, PRE_REMOVE, hook_env, run_hooks
from .mirror import ensure_mirror, update_mirror
from .paths import Layout, default_branch, sanitize_name
from .targets import DETACHED, Target, current_branch, list_clone_dirs, space_name

# Plain-text include lists read from the repository root.
PATTERN_FILES = (".worktreeinclude", ".spacesinclude")


# ---------------------------------------------------------------------------
# Pattern collection and seeding
# ---------------------------------------------------------------------------

def collect_includes(store: ConfigStore, repo_root: Path) -> list[str]:
    """Configured include patterns plus those from the pattern files."""
    includes = store.get_all(KEY_COPY_INCLUDE)
    for name in PATTERN_FILES:
        includes.extend(parse_pattern_file(repo_root / name))
    return dedupe(includes)


def report_copy(report: CopyReport, *, directories: bool = False) -> None:
    """Print a :class:`CopyReport` the way the copy commands show progress."""
    for warning in report.warnings:
        _ui.warn(warning.message)
    for match in report.patterns:
        _ui.detail(f"  {match.pattern}: {match.matched} match(es)")
    noun = "directory" if directories else "file"
    for entry in report.copied:
        if report.dry_run:
            _ui.info(f"[dry-run] Would copy {noun}: {entry.path}")
        else:
            _ui.info(f"Copied {noun} {entry.path}")
    if report.count:
        what = "directories" if directories else "file(s)"
        if report.dry_run:
            _ui.info(f"[dry-run] Would copy {report.count} {what}")
        else:
            _ui.info(f"Copied {report.count} {what}")


def seed_space(store: ConfigStore, src_root: Path, dst_root: Path, *, dry_run: bool = False) -> tuple[CopyReport, CopyReport]:
    """Copy the configured files, then directories, from *src_root*."""
    includes = collect_includes(store, src_root)
    excludes = store.get_all(KEY_COPY_EXCLUDE)
    if includes:
        _ui.step("Copying files...")
    files = copy_files(src_root, dst_root, includes, excludes, dry_run=dry_run)
    report_copy(files)

    dir_includes = store.get_all(KEY_COPY_INCLUDE_DIRS)
    dir_excludes = store.get_all(KEY_COPY_EXCLUDE_DIRS)
    if dir_includes:
        _ui.step("Copying directories...")
    dirs = copy_directories(src_root, dst_root, dir_includes, dir_excludes, dry_run=dry_run)
    report_copy(dirs, directories=True)
    return files, dirs


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def create_space(
    store: ConfigStore,
    layout: Layout,
    name: str,
    *,
    branch: str | None = None,
    base_ref: str | None = None,
    fetch: bool = True,
    copy: bool = True,
) -> Path:
    """Create space *name* and return its path.

    Ensures (and unless *fetch* is false, refreshes) the mirror, clones,
    checks out *branch* if given, seeds configured files unless *copy* is
    false, then runs the ``postCreate`` hooks.
    """
    if base_ref is not None and branch is None:
        raise SpacesError("--from requires --branch")

    if not sanitize_name(name):
        raise SpacesError(f"Invalid space name: {name!r}")
    clone_path = layout.space_path(name)
    _ui.step(f"Creating space: {name}")
    _ui.detail(f"Location: {clone_path}")
    _ui.detail(f"Space: {name}")
    if branch:
        _ui.detail(f"Branch: {branch}")

    ensure_mirror(layout.repo_root, layout.mirror_dir)
    if fetch:
        update_mirror(layout.repo_root, layout.mirror_dir)

    plan = ClonePlan(
        path=clone_path,
        branch=branch,
        base_ref=base_ref or default_branch(store, layout.repo_root),
    )
    create_clone(layout.repo_root, layout.mirror_dir, plan)

    if copy:
        seed_space(store, layout.repo_root, clone_path)

    env = hook_env(layout.repo_root, clone_path, name, current_branch(clone_path))
    run_hooks(POST_CREATE, store, clone_path, env)

    _ui.info(f"Space created: {clone_path}")
    return clone_path


# ---------------------------------------------------------------------------
# Remove
# ---------------------------------------------------------------------------

def check_removable(path: Path, clones_dir: Path) -> None:
    """Raise :class:`UnsafeRemovalError` unless *path* may be deleted.

    The path must sit strictly inside *clones_dir* and hold a ``.git``
    entry.
    """
    resolved = path.resolve()
    root = clones_dir.resolve()
    if resolved == root or root not in resolved.parents:
        raise UnsafeRemovalError(f"Refusing to remove path outside clones dir: {path}")
    if not (resolved / ".git").exists():
        raise UnsafeRemovalError(f"Refusing to remove non-git directory: {path}")


def safe_remove_clone(path: Path, clones_dir: Path) -> None:
    check_removable(path, clones_dir)
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise SpacesError(f"Failed to remove {path}: {exc}") from exc
    _ui.info(f"Removed space: {path}")


def remove_space(store: ConfigStore, layout: Layout, target: Target, *, force: bool = False) -> None:
    """Delete *target*, running the ``preRemove`` and ``postRemove`` hooks.

    A failing ``preRemove`` hook aborts unless *force*; a failing
    ``postRemove`` hook is only warned about.  The path checks of
    :func:`check_removable` apply regardless of *force*.
    """
    if target.is_main:
        raise SpacesError("Cannot remove main repository")

    _ui.step(f"Removing space: {target.path}")
    env = hook_env(layout.repo_root, target.path, target.name, target.branch)

    try:
        run_hooks(PRE_REMOVE, store, target.path, env)
    except HookError as exc:
        if not force:
            raise SpacesError(f"Pre-remove hook failed: {exc}") from exc
        _ui.warn("Pre-remove hook failed; continuing due to --force")

    safe_remove_clone(target.path, layout.clones_dir)

    try:
        run_hooks(POST_REMOVE, store, layout.repo_root, env)
    except HookError as exc:
        _ui.warn(f"Post-remove hook failed: {exc}")


# ---------------------------------------------------------------------------
# Clean
# ---------------------------------------------------------------------------

def remove_empty_dirs(clones_dir: Path, *, dry_run: bool = False) -> list[Path]:
    """Remove empty directories directly inside *clones_dir*.

    Returns the directories removed (or, with *dry_run*, that would be).
    """
    removed: list[Path] = []
    if not clones_dir.is_dir():
        return removed
    for entry in sorted(clones_dir.iterdir()):
        if entry.is_dir() and not entry.is_symlink() and not any(entry.iterdir()):
            if not dry_run:
                entry.rmdir()
            removed.append(entry)
    return removed


def gh_available(cwd: Path) -> bool:
    """True if the GitHub CLI is installed and can see this repository."""
    return _git.succeeds(["repo", "view"], cwd, program="gh")


def merged_pr_state(path: Path, branch: str) -> str | None:
    """State of the latest merged PR for *branch* (``"MERGED"``), if any."""
    return _git.stdout_opt(
        ["pr", "list", "--head", branch, "--state", "merged",
         "--json", "state", "--jq", ".[0].state"],
        path, program="gh",
    )


@dataclass
class MergedCandidate:
    path: Path
    name: str
    branch: str


@dataclass
class MergedScan:
    """Clones whose branch has a merged PR, plus how many were skipped."""
    candidates: list[MergedCandidate] = field(default_factory=list)
    skipped: int = 0


def find_merged_spaces(layout: Layout) -> MergedScan:
    """Scan clones for branches whose pull request has been merged.

    Detached and dirty clones are skipped (and counted); clones on the
    main repository's current branch are ignored.
    """
    scan = MergedScan()
    main_branch = current_branch(layout.repo_root) or ""
    for path in list_clone_dirs(layout.clones_dir, layout.prefix):
        branch = current_branch(path)
        if branch is None or branch == DETACHED:
            scan.skipped += 1
            continue
        if branch == main_branch:
            continue
        if _git.stdout_opt(["status", "--porcelain"], path):
            scan.skipped += 1
            continue
        if merged_pr_state(path, branch) == "MERGED":
            scan.candidates.append(
                MergedCandidate(path=path, name=space_name(path, layout.prefix), branch=branch)
            )
    return scan
