"""The shared mirror that new spaces borrow objects from.

One ``git clone --mirror`` per repository, created on first use and
refreshed on demand.  Nothing here ever deletes it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import _git, _ui


@dataclass
class MirrorStatus:
    path: Path
    present: bool

    @property
    def label(self) -> str:
        return "present" if self.present else "missing"


def mirror_status(mirror_dir: Path) -> MirrorStatus:
    return MirrorStatus(path=mirror_dir, present=mirror_dir.exists())


def ensure_mirror(repo_root: Path, mirror_dir: Path) -> bool:
    """Create the mirror from *repo_root* if it does not exist.

    Returns True if a mirror was created.
    """
    if mirror_dir.exists():
        return False
    mirror_dir.parent.mkdir(parents=True, exist_ok=True)
    _ui.step(f"Creating mirror: {mirror_dir}")
    _git.check(["clone", "--mirror", repo_root, mirror_dir])
    return True


def update_mirror(repo_root: Path, mirror_dir: Path) -> None:
    """Refresh the mirror (best effort; failures are ignored).

    Fetches from the upstream ``origin`` when the repository has one, then
    pulls the repository's own branches and tags so unpushed work is
    available to new spaces too.
    """
    origin_url = _git.stdout_opt(["remote", "get-url", "origin"], repo_root)
    if origin_url:
        _git.run(["remote", "set-url", "origin", origin_url], mirror_dir)
        _git.run(["fetch", "--prune", "origin"], mirror_dir)

    _git.run(
        ["fetch", repo_root, "+refs/heads/*:refs/heads/*", "+refs/tags/*:refs/tags/*"],
        mirror_dir,
    )
