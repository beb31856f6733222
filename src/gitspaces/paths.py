"""Filesystem locations derived from configuration and the repository root."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from . import _git
from .config import (
    ConfigStore,
    ENV_CLONES_DIR,
    ENV_CLONES_PREFIX,
    ENV_DEFAULT_BRANCH,
    ENV_MIRRORS_DIR,
    KEY_CLONES_DIR,
    KEY_CLONES_PREFIX,
    KEY_DEFAULT_BRANCH,
    KEY_MIRRORS_DIR,
)
from .exceptions import SpacesError

# Characters that cannot appear in a space's directory name.
_UNSAFE_NAME_CHARS = '/\\ :*?"<>|#'
_SANITIZE_TABLE = str.maketrans({c: "-" for c in _UNSAFE_NAME_CHARS})


def repo_root(cwd: str | os.PathLike | None = None) -> Path:
    """Top level of the working tree containing *cwd*."""
    return Path(_git.stdout(["rev-parse", "--show-toplevel"], cwd))


def sanitize_name(name: str) -> str:
    """Turn a space or branch name into a directory name.

    Path separators, whitespace and shell/Windows-reserved characters become
    ``-``; leading and trailing ``-`` are stripped.  Idempotent.
    """
    return name.translate(_SANITIZE_TABLE).strip("-")


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError:
        return Path("~")


def expand_home(path: str) -> Path:
    """Expand a leading ``~`` or ``~/`` (but not ``~user``)."""
    if path == "~":
        return _home()
    if path.startswith("~/"):
        return _home() / path[2:]
    return Path(path)


def _repo_name(root: Path) -> str:
    return root.name or "repo"


def _configured_dir(value: str, root: Path) -> Path:
    path = expand_home(value)
    if not path.is_absolute():
        path = root / path
    return path


def clones_dir(store: ConfigStore, root: Path) -> Path:
    """Directory holding the space clones.

    Defaults to ``<repo>-clones`` next to the repository.
    """
    configured = store.get_default(KEY_CLONES_DIR, ENV_CLONES_DIR, "")
    if configured:
        return _configured_dir(configured, root)
    if root.parent == root:
        raise SpacesError(f"Repository has no parent directory: {root}")
    return root.parent / f"{_repo_name(root)}-clones"


def clones_prefix(store: ConfigStore) -> str:
    return store.get_default(KEY_CLONES_PREFIX, ENV_CLONES_PREFIX, "")


def mirror_dir(store: ConfigStore, root: Path) -> Path:
    """Location of the shared mirror (``~/.cache/spaces/mirrors/<repo>``)."""
    configured = store.get_default(KEY_MIRRORS_DIR, ENV_MIRRORS_DIR, "")
    if configured:
        return _configured_dir(configured, root)
    return _home() / ".cache" / "spaces" / "mirrors" / _repo_name(root)


def default_branch(store: ConfigStore, root: Path) -> str:
    """Base branch for new spaces.

    A configured value other than ``auto`` wins.  Otherwise follow
    ``origin/HEAD``, then probe ``origin/main`` and ``origin/master``,
    and finally assume ``main``.
    """
    configured = store.get_default(KEY_DEFAULT_BRANCH, ENV_DEFAULT_BRANCH, "auto")
    if configured != "auto":
        return configured

    origin_head = _git.stdout_opt(
        ["symbolic-ref", "--quiet", "refs/remotes/origin/HEAD"], root,
    )
    prefix = "refs/remotes/origin/"
    if origin_head and origin_head.startswith(prefix):
        return origin_head[len(prefix):]

    for candidate in ("main", "master"):
        if _git.succeeds(
            ["show-ref", "--verify", "--quiet", f"refs/remotes/origin/{candidate}"], root,
        ):
            return candidate
    return "main"


@dataclass(frozen=True)
class Layout:
    """Resolved locations for one repository."""
    repo_root: Path
    clones_dir: Path
    prefix: str
    mirror_dir: Path

    @classmethod
    def resolve(cls, store: ConfigStore, root: Path) -> Layout:
        return cls(
            repo_root=root,
            clones_dir=clones_dir(store, root),
            prefix=clones_prefix(store),
            mirror_dir=mirror_dir(store, root),
        )

    def space_path(self, name: str) -> Path:
        """Directory a space called *name* lives in."""
        return self.clones_dir / f"{self.prefix}{sanitize_name(name)}"
