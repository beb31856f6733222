"""Shared fixtures for gitspaces tests."""

import shutil
import subprocess

import pytest
from click.testing import CliRunner

from gitspaces.config import ConfigStore
from gitspaces.paths import Layout

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(*args, cwd=None):
    """Run git in *cwd* and return trimmed stdout (fails the test on error)."""
    proc = subprocess.run(
        ["git", *[str(a) for a in args]], cwd=cwd,
        capture_output=True, text=True,
    )
    assert proc.returncode == 0, proc.stderr
    return proc.stdout.strip()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the user's home, git config and SPACES_* vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_SYSTEM", str(home / "system-gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    for name in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
        monkeypatch.setenv(name, "Test User")
    for name in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
        monkeypatch.setenv(name, "test@example.com")
    for name in ("SPACES_REPO", "SPACES_CLONES_DIR", "SPACES_CLONES_PREFIX",
                 "SPACES_MIRRORS_DIR", "SPACES_DEFAULT_BRANCH"):
        monkeypatch.delenv(name, raising=False)
    return home


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


# ---------------------------------------------------------------------------
# Repository fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def git_repo(tmp_path):
    """A real repository at ``tmp_path/repo`` with one commit on ``main``."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = tmp_path / "repo"
    root.mkdir(exist_ok=True)
    git("init", "-q", "-b", "main", cwd=root)
    (root / "README.md").write_text("hello\n")
    (root / ".env").write_text("SECRET=1\n")
    git("add", "README.md", cwd=root)
    git("commit", "-q", "-m", "initial", cwd=root)
    return root.resolve()


@pytest.fixture
def memory_store():
    """Empty in-memory config store."""
    return ConfigStore.in_memory()


@pytest.fixture
def layout(tmp_path):
    """Layout with a plain (non-git) repo dir and an empty clones dir."""
    root = tmp_path / "repo"
    root.mkdir(exist_ok=True)
    clones = tmp_path / "repo-clones"
    clones.mkdir()
    return Layout(
        repo_root=root,
        clones_dir=clones,
        prefix="",
        mirror_dir=tmp_path / "mirror",
    )


@pytest.fixture
def fake_clone(layout):
    """Create a directory that looks like a clone and return its path."""
    def make(name):
        path = layout.clones_dir / name
        (path / ".git").mkdir(parents=True)
        (path / "file.txt").write_text("data")
        return path
    return make
