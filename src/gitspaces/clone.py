"""Creating a space's clone and checking out its branch."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import _git, _ui
from .exceptions import SpacesError


@dataclass
class ClonePlan:
    """What to create: *path*, optional *branch*, and the ref a new branch starts from."""
    path: Path
    branch: str | None
    base_ref: str


def clone_source(repo_root: Path) -> str:
    """``origin``'s URL, or the repository itself when there is no origin."""
    return _git.stdout_opt(["remote", "get-url", "origin"], repo_root) or str(repo_root)


def create_clone(repo_root: Path, mirror_dir: Path, plan: ClonePlan) -> None:
    """Clone into ``plan.path`` borrowing objects from *mirror_dir*."""
    if plan.path.exists():
        raise SpacesError(f"Clone already exists: {plan.path}")
    plan.path.parent.mkdir(parents=True, exist_ok=True)

    _ui.step("Cloning repository...")
    _git.check([
        "clone", "--reference-if-able", mirror_dir,
        clone_source(repo_root), plan.path,
    ])
    if plan.branch:
        checkout_branch(mirror_dir, plan, plan.branch)


def checkout_branch(mirror_dir: Path, plan: ClonePlan, branch: str) -> str:
    """Check out *branch* in the new clone.

    Tries, in order: track an existing remote branch, check out an existing
    local branch, create a new branch from ``plan.base_ref``.  Returns
    ``"remote"``, ``"local"`` or ``"new"`` accordingly.
    """
    if _git.succeeds(["show-ref", "--verify", "--quiet", f"refs/remotes/origin/{branch}"], mirror_dir):
        _git.check(["checkout", "-b", branch, f"origin/{branch}"], plan.path)
        return "remote"

    if _git.succeeds(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], mirror_dir):
        _git.check(["checkout", branch], plan.path)
        return "local"

    _git.check(["checkout", "-b", branch, plan.base_ref], plan.path)
    return "new"
