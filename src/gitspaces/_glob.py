"""Shared glob matching for the copy engine."""

from __future__ import annotations

from fnmatch import fnmatchcase


def _has_magic(segment: str) -> bool:
    return any(c in segment for c in "*?[")


def _glob_match(pattern: str, name: str) -> bool:
    """Match *name* against glob *pattern*.

    Case-sensitive.  Wildcards match a leading ``.`` and, when *name* is a
    relative path, the ``/`` separator too, so ``secrets/*`` also covers
    ``secrets/a/b``.
    """
    return fnmatchcase(name, pattern)
