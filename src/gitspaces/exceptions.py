"""Exceptions for gitspaces."""


class SpacesError(Exception):
    """Base class for all gitspaces errors."""


class GitError(SpacesError):
    """Raised when an external command (git, gh) exits non-zero.

    The message is the command's trimmed stderr.
    """

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


class ConfigError(SpacesError):
    """Raised for invalid configuration writes (e.g. to the system scope)."""


class TargetNotFoundError(SpacesError):
    """Raised when a space identifier does not resolve to a directory."""

    def __init__(self, identifier: str):
        super().__init__(f"Target not found for space: {identifier}")
        self.identifier = identifier


class UnsafeRemovalError(SpacesError):
    """Raised when a removal target fails the safety checks.

    Removal requires the path to live strictly inside the clones directory
    and to contain a ``.git`` marker.  ``--force`` never bypasses this.
    """


class HookError(SpacesError):
    """Raised after a hook phase finishes with one or more failures."""

    def __init__(self, phase: str, failed: int, total: int):
        super().__init__(f"{failed} hook(s) failed")
        self.phase = phase
        self.failed = failed
        self.total = total
