"""Map user-supplied identifiers to spaces on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from . import _git
from .exceptions import TargetNotFoundError
from .paths import sanitize_name

MAIN_ID = "1"
DETACHED = "(detached)"
UNKNOWN = "unknown"


@dataclass
class Target:
    """A resolved space.

    Attributes:
        is_main: True for the main repository (identifier ``"1"``).
        path: Working tree directory.
        name: Display name; the identifier exactly as the user typed it.
        branch: Current branch, ``"(detached)"``, or ``"unknown"``.
    """
    is_main: bool
    path: Path
    name: str
    branch: str


def current_branch(path: str | os.PathLike) -> str | None:
    """Branch checked out at *path*, ``"(detached)"``, or ``None`` if unknown."""
    branch = (
        _git.stdout_opt(["branch", "--show-current"], path)
        or _git.stdout_opt(["rev-parse", "--abbrev-ref", "HEAD"], path)
    )
    if branch == "HEAD":
        return DETACHED
    return branch or None


def resolve_target(identifier: str, repo_root: Path, clones_dir: Path, prefix: str) -> Target:
    """Resolve *identifier* to a :class:`Target`.

    ``"1"`` is always the main repository.  Anything else is sanitized the
    same way :func:`~gitspaces.paths.sanitize_name` names new spaces and
    looked up in *clones_dir*.

    Raises:
        TargetNotFoundError: if no such space directory exists.
    """
    if identifier == MAIN_ID:
        return Target(
            is_main=True,
            path=repo_root,
            name="main",
            branch=current_branch(repo_root) or UNKNOWN,
        )

    sanitized = sanitize_name(identifier)
    if sanitized:
        direct = clones_dir / f"{prefix}{sanitized}"
        if direct.is_dir():
            return Target(
                is_main=False,
                path=direct,
                name=identifier,
                branch=current_branch(direct) or UNKNOWN,
            )
    raise TargetNotFoundError(identifier)


def space_status(path: Path) -> str:
    """One of ``missing``, ``detached``, ``dirty`` or ``ok``."""
    if not path.exists():
        return "missing"
    if (current_branch(path) or DETACHED) == DETACHED:
        return "detached"
    porcelain = _git.stdout_opt(["status", "--porcelain"], path)
    if porcelain:
        return "dirty"
    return "ok"


def space_name(path: Path, prefix: str) -> str:
    """Space name for a clone directory (its name minus *prefix*)."""
    name = path.name or "space"
    if prefix and name.startswith(prefix):
        return name[len(prefix):]
    return name


def list_clone_dirs(clones_dir: Path, prefix: str) -> list[Path]:
    """Sorted clone directories in *clones_dir* whose names carry *prefix*."""
    if not clones_dir.is_dir():
        return []
    return sorted(
        entry for entry in clones_dir.iterdir()
        if entry.is_dir() and entry.name.startswith(prefix)
    )
