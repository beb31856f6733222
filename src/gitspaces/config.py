"""Layered ``spaces.*`` configuration.

Values live in four sources, narrowest first:

- **local** – the clone's own ``.git/config`` (untracked)
- **file** – ``.spacesrc`` at the repository root (tracked, read-only here)
- **global** – the user's git config
- **system** – the machine's git config

Two lookup styles coexist on purpose.  :meth:`ConfigStore.get_all` in
:attr:`Scope.AUTO` accumulates every value from every source (pattern
lists want all of them), while :meth:`ConfigStore.get_default` returns the
first non-empty single value along a fixed precedence chain and always
ends in a literal fallback.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping, Protocol

from dulwich.config import ConfigFile

from . import _git
from .exceptions import ConfigError

NAMESPACE = "spaces."
SPACESRC = ".spacesrc"

KEY_COPY_INCLUDE = "spaces.copy.include"
KEY_COPY_EXCLUDE = "spaces.copy.exclude"
KEY_COPY_INCLUDE_DIRS = "spaces.copy.includeDirs"
KEY_COPY_EXCLUDE_DIRS = "spaces.copy.excludeDirs"
KEY_CLONES_DIR = "spaces.clones.dir"
KEY_CLONES_PREFIX = "spaces.clones.prefix"
KEY_MIRRORS_DIR = "spaces.mirrors.dir"
KEY_DEFAULT_BRANCH = "spaces.defaultBranch"

ENV_CLONES_DIR = "SPACES_CLONES_DIR"
ENV_CLONES_PREFIX = "SPACES_CLONES_PREFIX"
ENV_MIRRORS_DIR = "SPACES_MIRRORS_DIR"
ENV_DEFAULT_BRANCH = "SPACES_DEFAULT_BRANCH"


def hook_key(phase: str) -> str:
    return f"spaces.hook.{phase}"


class Scope(str, Enum):
    """Configuration scope.

    ``AUTO`` is the read-only composite of all sources; writes resolve it
    to ``LOCAL`` via :meth:`for_write`.
    """
    AUTO = "auto"
    LOCAL = "local"
    GLOBAL = "global"
    SYSTEM = "system"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @property
    def flag(self) -> str:
        """The ``git config`` option selecting this scope (empty for AUTO)."""
        return "" if self is Scope.AUTO else f"--{self.value}"

    def for_write(self) -> Scope:
        """Return the scope a write should target, rejecting SYSTEM."""
        if self is Scope.SYSTEM:
            raise ConfigError("--system not supported for write operations")
        if self is Scope.AUTO:
            return Scope.LOCAL
        return self


# Accumulation order for AUTO reads, with the label shown by ``list``.
_SOURCES = (
    ("local", "local"),
    ("file", SPACESRC),
    ("global", "global"),
    ("system", "system"),
)


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop repeated strings, keeping the first occurrence of each."""
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class ConfigBackend(Protocol):
    """Key/value storage for one configuration source."""

    def get_all(self, key: str) -> list[str]: ...

    def set_all(self, key: str, value: str) -> None: ...

    def add_value(self, key: str, value: str) -> None: ...

    def unset_all(self, key: str) -> None: ...

    def list_by_prefix(self, prefix: str) -> list[tuple[str, str]]: ...


class GitConfigBackend:
    """One ``git config`` scope, accessed by shelling out.

    Lookups never raise: a missing key, a missing repository, or a broken
    git installation all read as "no values".
    """

    def __init__(self, scope: Scope, repo_root: str | os.PathLike | None = None):
        if scope is Scope.AUTO:
            raise ValueError("GitConfigBackend needs a concrete scope")
        self.scope = scope
        self.repo_root = repo_root

    def __repr__(self) -> str:
        return f"GitConfigBackend({self.scope.value!r}, {self.repo_root!r})"

    def _args(self, *args: str) -> list[str]:
        return ["config", self.scope.flag, *args]

    def get_all(self, key: str) -> list[str]:
        out = _git.stdout_opt(self._args("--get-all", key), self.repo_root)
        if out is None:
            return []
        return out.splitlines()

    def set_all(self, key: str, value: str) -> None:
        _git.check(self._args("--replace-all", key, value), self.repo_root)

    def add_value(self, key: str, value: str) -> None:
        _git.check(self._args("--add", key, value), self.repo_root)

    def unset_all(self, key: str) -> None:
        # Exit status 5 just means the key was not set.
        _git.run(self._args("--unset-all", key), self.repo_root)

    def list_by_prefix(self, prefix: str) -> list[tuple[str, str]]:
        out = _git.stdout_opt(
            self._args("--get-regexp", "^" + re.escape(prefix)), self.repo_root,
        )
        if out is None:
            return []
        return [_split_regexp_line(line) for line in out.splitlines()]


def _split_regexp_line(line: str) -> tuple[str, str]:
    """Split a ``git config --get-regexp`` line into ``(key, value)``."""
    key, _, value = line.partition(" ")
    return key, value


def _split_key(key: str) -> tuple[tuple[str, ...], str]:
    """Split ``section[.subsection].name`` into dulwich's section tuple + name."""
    section, _, rest = key.partition(".")
    subsection, _, name = rest.rpartition(".")
    if not name:
        raise ValueError(f"Invalid config key: {key}")
    if subsection:
        return (section, subsection), name
    return (section,), name


class FileConfigBackend:
    """A git-config-format file such as ``.spacesrc``, parsed with dulwich.

    The file is re-read on every lookup.  A missing or malformed file reads
    as empty.  Writes are refused: the file is meant to be edited and
    committed by hand.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileConfigBackend({str(self.path)!r})"

    def _load(self) -> ConfigFile | None:
        if not self.path.is_file():
            return None
        try:
            return ConfigFile.from_path(str(self.path))
        except (OSError, ValueError):
            return None

    def get_all(self, key: str) -> list[str]:
        cf = self._load()
        if cf is None:
            return []
        try:
            section, name = _split_key(key)
            values = list(cf.get_multivar(section, name))
        except (KeyError, ValueError):
            return []
        return [v.decode("utf-8", "replace") for v in values]

    def _read_only(self, key: str):
        raise ConfigError(f"{self.path.name} is read-only; edit it directly to change {key}")

    def set_all(self, key: str, value: str) -> None:
        self._read_only(key)

    def add_value(self, key: str, value: str) -> None:
        self._read_only(key)

    def unset_all(self, key: str) -> None:
        self._read_only(key)

    def list_by_prefix(self, prefix: str) -> list[tuple[str, str]]:
        cf = self._load()
        if cf is None:
            return []
        result: list[tuple[str, str]] = []
        for section in cf.sections():
            # git lowercases section and variable names, never subsections
            parts = [section[0].decode("utf-8", "replace").lower()]
            parts.extend(s.decode("utf-8", "replace") for s in section[1:])
            base = ".".join(parts)
            for name, value in cf.items(section):
                key = f"{base}.{name.decode('utf-8', 'replace').lower()}"
                if key.startswith(prefix):
                    result.append((key, value.decode("utf-8", "replace")))
        return result


class MemoryConfigBackend:
    """In-memory backend with git's multi-value semantics."""

    def __init__(self, values: Mapping[str, Iterable[str]] | None = None):
        self._values: dict[str, list[str]] = {}
        for key, vals in (values or {}).items():
            self._values[key] = list(vals)

    def __repr__(self) -> str:
        return f"MemoryConfigBackend({self._values!r})"

    def get_all(self, key: str) -> list[str]:
        return list(self._values.get(key, ()))

    def set_all(self, key: str, value: str) -> None:
        self._values[key] = [value]

    def add_value(self, key: str, value: str) -> None:
        self._values.setdefault(key, []).append(value)

    def unset_all(self, key: str) -> None:
        self._values.pop(key, None)

    def list_by_prefix(self, prefix: str) -> list[tuple[str, str]]:
        return [
            (key, value)
            for key, values in self._values.items()
            if key.startswith(prefix)
            for value in values
        ]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ConfigStore:
    """Resolves ``spaces.*`` settings across the four sources.

    Build one per repository with :meth:`for_repo` and pass it to every
    function that needs configuration.  *env* supplies environment
    fallbacks for :meth:`get_default` (defaults to ``os.environ``).
    """

    def __init__(
        self,
        *,
        local: ConfigBackend,
        file: ConfigBackend,
        global_: ConfigBackend,
        system: ConfigBackend,
        env: Mapping[str, str] | None = None,
    ):
        self._backends: dict[str, ConfigBackend] = {
            "local": local,
            "file": file,
            "global": global_,
            "system": system,
        }
        self.env = os.environ if env is None else env

    @classmethod
    def for_repo(cls, repo_root: str | os.PathLike, env: Mapping[str, str] | None = None) -> ConfigStore:
        """Store backed by git config scopes and ``<repo_root>/.spacesrc``."""
        return cls(
            local=GitConfigBackend(Scope.LOCAL, repo_root),
            file=FileConfigBackend(Path(repo_root) / SPACESRC),
            global_=GitConfigBackend(Scope.GLOBAL, repo_root),
            system=GitConfigBackend(Scope.SYSTEM, repo_root),
            env=env,
        )

    @classmethod
    def in_memory(cls, *, local=None, file=None, global_=None, system=None,
                  env: Mapping[str, str] | None = None) -> ConfigStore:
        """Store backed entirely by :class:`MemoryConfigBackend` instances."""
        return cls(
            local=MemoryConfigBackend(local),
            file=MemoryConfigBackend(file),
            global_=MemoryConfigBackend(global_),
            system=MemoryConfigBackend(system),
            env={} if env is None else env,
        )

    def backend(self, source: str | Scope) -> ConfigBackend:
        """Return the backend for ``local``/``file``/``global``/``system``."""
        name = source.value if isinstance(source, Scope) else source
        try:
            return self._backends[name]
        except KeyError:
            raise ValueError(f"No single backend for source: {name}") from None

    # -- reads -------------------------------------------------------------

    def get_all(self, key: str, scope: Scope = Scope.AUTO) -> list[str]:
        """All values for *key* in *scope*, in order.

        In AUTO scope the values of local, ``.spacesrc``, global and system
        are concatenated in that order with duplicates dropped.
        """
        if scope is not Scope.AUTO:
            return self.backend(scope).get_all(key)
        merged: list[str] = []
        for source, _label in _SOURCES:
            merged.extend(self._backends[source].get_all(key))
        return dedupe(merged)

    def get(self, key: str, scope: Scope = Scope.AUTO) -> str | None:
        """Single value for *key*, like ``git config --get``.

        The last value wins within a scope.  AUTO consults local, then
        global, then system; ``.spacesrc`` is not part of git's view.
        """
        if scope is not Scope.AUTO:
            values = self.backend(scope).get_all(key)
            return values[-1] if values else None
        for source in ("local", "global", "system"):
            values = self._backends[source].get_all(key)
            if values:
                return values[-1]
        return None

    def get_default(
        self,
        key: str,
        env_name: str = "",
        fallback: str = "",
        file_key: str | None = None,
    ) -> str:
        """First non-empty value along the default-resolution chain.

        Order: local value, ``.spacesrc`` value (read under *file_key* when
        given), AUTO value, environment variable *env_name*, *fallback*.
        """
        value = self.get(key, Scope.LOCAL)
        if value:
            return value

        file_values = self._backends["file"].get_all(file_key or key)
        if file_values and file_values[0]:
            return file_values[0]

        value = self.get(key, Scope.AUTO)
        if value:
            return value

        if env_name:
            value = self.env.get(env_name)
            if value:
                return value

        return fallback

    # -- writes ------------------------------------------------------------

    def set(self, key: str, value: str, scope: Scope = Scope.AUTO) -> Scope:
        """Replace all values of *key*; returns the scope written."""
        target = scope.for_write()
        self.backend(target).set_all(key, value)
        return target

    def add(self, key: str, value: str, scope: Scope = Scope.AUTO) -> Scope:
        """Append a value to multi-valued *key*; returns the scope written."""
        target = scope.for_write()
        self.backend(target).add_value(key, value)
        return target

    def unset(self, key: str, scope: Scope = Scope.AUTO) -> Scope:
        """Remove every value of *key*; returns the scope written."""
        target = scope.for_write()
        self.backend(target).unset_all(key)
        return target

    # -- listing -----------------------------------------------------------

    def list(self, scope: Scope = Scope.AUTO) -> list[str]:
        """``key=value`` lines for every ``spaces.*`` setting in *scope*.

        In AUTO scope each line carries a ``[source]`` label and a line
        already shown for a narrower source is not repeated.
        """
        if scope is not Scope.AUTO:
            return [
                f"{key}={value}"
                for key, value in self.backend(scope).list_by_prefix(NAMESPACE)
            ]
        seen: set[str] = set()
        lines: list[str] = []
        for source, label in _SOURCES:
            for key, value in self._backends[source].list_by_prefix(NAMESPACE):
                line = f"{key}={value}"
                if line in seen:
                    continue
                seen.add(line)
                lines.append(f"{line} [{label}]")
        return lines
