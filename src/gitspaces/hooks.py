"""User-defined lifecycle hooks (``spaces.hook.<phase>``)."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Mapping

from . import _ui
from .config import ConfigStore, hook_key
from .exceptions import HookError

POST_CREATE = "postCreate"
PRE_REMOVE = "preRemove"
POST_REMOVE = "postRemove"


def hook_env(repo_root: Path, clone_path: Path, space: str, branch: str | None = None) -> dict[str, str]:
    """Variables exported to every hook."""
    env = {
        "REPO_ROOT": str(repo_root),
        "CLONE_PATH": str(clone_path),
        "SPACE": space,
    }
    if branch:
        env["BRANCH"] = branch
    return env


def run_hooks(phase: str, store: ConfigStore, cwd: Path, env: Mapping[str, str]) -> int:
    """Run every hook registered for *phase* with ``sh -c``, in order.

    A failing hook does not stop later ones; failures are counted and
    raised together as :class:`HookError` once the phase is done.
    Returns the number of hooks run.
    """
    hooks = store.get_all(hook_key(phase))
    if not hooks:
        return 0

    _ui.step(f"Running {phase} hooks...")
    child_env = {**os.environ, **env}
    ran = 0
    failed = 0
    for idx, hook in enumerate(hooks, 1):
        if not hook.strip():
            continue
        _ui.info(f"Hook {idx}: {hook}")
        ran += 1
        try:
            proc = subprocess.run(["sh", "-c", hook], cwd=cwd, env=child_env)
        except OSError as exc:
            failed += 1
            _ui.error(f"Hook {idx} failed: {exc}")
            continue
        if proc.returncode != 0:
            failed += 1
            _ui.error(f"Hook {idx} failed")

    if failed:
        raise HookError(phase, failed, ran)
    return ran
