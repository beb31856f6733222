"""Subprocess wrappers for git and the GitHub CLI.

Every invocation yields a :class:`Success` or :class:`Failure`.  Call sites
pick the policy: :func:`stdout_opt` turns a failure into ``None`` for
best-effort probes, while :func:`stdout` and :func:`check` raise
:class:`~gitspaces.exceptions.GitError`.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Sequence, Union

from .exceptions import GitError


@dataclass(frozen=True)
class Success:
    output: str

    ok = True


@dataclass(frozen=True)
class Failure:
    diagnostic: str
    returncode: int | None = None

    ok = False


Result = Union[Success, Failure]


def run(
    args: Sequence[str | os.PathLike],
    cwd: str | os.PathLike | None = None,
    *,
    program: str = "git",
) -> Result:
    """Run *program* with *args* and capture its output.

    stdout is trimmed on success; stderr is trimmed into the diagnostic on
    failure.  A missing executable is reported as a :class:`Failure`.
    """
    cmd = [program, *(os.fspath(a) for a in args)]
    try:
        proc = subprocess.run(
            cmd, cwd=cwd, capture_output=True, encoding="utf-8", errors="replace",
            stdin=subprocess.DEVNULL,
        )
    except OSError as exc:
        return Failure(f"failed to run {program}: {exc}")
    if proc.returncode == 0:
        return Success(proc.stdout.strip())
    return Failure(proc.stderr.strip(), proc.returncode)


def stdout(args, cwd=None, *, program: str = "git") -> str:
    """Return trimmed stdout, raising :class:`GitError` on failure."""
    result = run(args, cwd, program=program)
    if isinstance(result, Failure):
        raise GitError(result.diagnostic, result.returncode)
    return result.output


def check(args, cwd=None, *, program: str = "git") -> None:
    """Run for effect only, raising :class:`GitError` on failure."""
    stdout(args, cwd, program=program)


def stdout_opt(args, cwd=None, *, program: str = "git") -> str | None:
    """Return trimmed stdout, or ``None`` on failure or empty output."""
    result = run(args, cwd, program=program)
    if isinstance(result, Failure) or not result.output:
        return None
    return result.output


def succeeds(args, cwd=None, *, program: str = "git") -> bool:
    """True if the command exits zero (e.g. ``show-ref --verify --quiet``)."""
    return run(args, cwd, program=program).ok
