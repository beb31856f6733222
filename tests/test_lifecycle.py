"""Tests for creating, seeding and removing spaces."""

import os

import pytest

from gitspaces.config import ConfigStore
from gitspaces.exceptions import SpacesError, UnsafeRemovalError
from gitspaces.lifecycle import (
    check_removable,
    collect_includes,
    create_space,
    find_merged_spaces,
    remove_empty_dirs,
    remove_space,
    seed_space,
)
from gitspaces.paths import Layout
from gitspaces.targets import Target, current_branch

from conftest import git, requires_git


def _target(path, name="x"):
    return Target(is_main=False, path=path, name=name, branch="b")


# ---------------------------------------------------------------------------
# Removal safety
# ---------------------------------------------------------------------------

class TestCheckRemovable:
    def test_ok(self, layout, fake_clone):
        check_removable(fake_clone("a"), layout.clones_dir)

    def test_outside_clones_dir(self, tmp_path, layout):
        other = tmp_path / "other"
        (other / ".git").mkdir(parents=True)
        with pytest.raises(UnsafeRemovalError):
            check_removable(other, layout.clones_dir)

    def test_clones_dir_itself(self, layout):
        (layout.clones_dir / ".git").mkdir()
        with pytest.raises(UnsafeRemovalError):
            check_removable(layout.clones_dir, layout.clones_dir)

    def test_no_git_marker(self, layout):
        bare = layout.clones_dir / "plain"
        bare.mkdir()
        with pytest.raises(UnsafeRemovalError):
            check_removable(bare, layout.clones_dir)

    def test_dotdot_escape(self, tmp_path, layout):
        other = tmp_path / "other"
        (other / ".git").mkdir(parents=True)
        with pytest.raises(UnsafeRemovalError):
            check_removable(layout.clones_dir / ".." / "other", layout.clones_dir)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="no symlink support")
    def test_symlink_escape(self, tmp_path, layout):
        other = tmp_path / "other"
        (other / ".git").mkdir(parents=True)
        os.symlink(other, layout.clones_dir / "sneaky")
        with pytest.raises(UnsafeRemovalError):
            check_removable(layout.clones_dir / "sneaky", layout.clones_dir)


class TestRemoveSpace:
    def test_removes(self, layout, fake_clone, memory_store):
        path = fake_clone("a")
        remove_space(memory_store, layout, _target(path))
        assert not path.exists()

    def test_refuses_main(self, layout, memory_store):
        main = Target(is_main=True, path=layout.repo_root, name="main", branch="main")
        with pytest.raises(SpacesError):
            remove_space(memory_store, layout, main)
        assert layout.repo_root.exists()

    def test_unsafe_path_not_deleted_even_with_force(self, tmp_path, layout, memory_store):
        other = tmp_path / "other"
        (other / ".git").mkdir(parents=True)
        with pytest.raises(UnsafeRemovalError):
            remove_space(memory_store, layout, _target(other), force=True)
        assert other.exists()

    def test_delete_failure_raises_spaces_error(self, layout, fake_clone, memory_store, monkeypatch):
        path = fake_clone("a")

        def rmtree(p, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(p))

        monkeypatch.setattr("gitspaces.lifecycle.shutil.rmtree", rmtree)
        with pytest.raises(SpacesError, match="Failed to remove") as exc_info:
            remove_space(memory_store, layout, _target(path))
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert path.exists()

    def test_pre_remove_failure_blocks(self, layout, fake_clone):
        path = fake_clone("a")
        store = ConfigStore.in_memory(local={"spaces.hook.preRemove": ["exit 1"]})
        with pytest.raises(SpacesError, match="Pre-remove hook failed"):
            remove_space(store, layout, _target(path))
        assert path.exists()

    def test_pre_remove_failure_forced(self, layout, fake_clone):
        path = fake_clone("a")
        store = ConfigStore.in_memory(local={"spaces.hook.preRemove": ["exit 1"]})
        remove_space(store, layout, _target(path), force=True)
        assert not path.exists()

    def test_post_remove_failure_only_warns(self, layout, fake_clone):
        path = fake_clone("a")
        store = ConfigStore.in_memory(local={"spaces.hook.postRemove": ["exit 1"]})
        remove_space(store, layout, _target(path))
        assert not path.exists()

    def test_hook_env_and_cwd(self, layout, fake_clone):
        path = fake_clone("a")
        store = ConfigStore.in_memory(local={
            "spaces.hook.preRemove": ['cat file.txt > "$REPO_ROOT/pre.txt"'],
            "spaces.hook.postRemove": ['echo "$SPACE $BRANCH" > post.txt'],
        })
        remove_space(store, layout, _target(path, name="feature/a"))
        assert (layout.repo_root / "pre.txt").read_text() == "data"
        assert (layout.repo_root / "post.txt").read_text().strip() == "feature/a b"


class TestRemoveEmptyDirs:
    def test_only_empty_dirs(self, layout, fake_clone):
        fake_clone("full")
        (layout.clones_dir / "empty1").mkdir()
        (layout.clones_dir / "empty2").mkdir()
        removed = remove_empty_dirs(layout.clones_dir)
        assert [p.name for p in removed] == ["empty1", "empty2"]
        assert sorted(p.name for p in layout.clones_dir.iterdir()) == ["full"]

    def test_dry_run(self, layout):
        (layout.clones_dir / "empty").mkdir()
        removed = remove_empty_dirs(layout.clones_dir, dry_run=True)
        assert [p.name for p in removed] == ["empty"]
        assert (layout.clones_dir / "empty").exists()

    def test_missing_clones_dir(self, tmp_path):
        assert remove_empty_dirs(tmp_path / "nope") == []


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------

class TestSeeding:
    def test_collect_includes_merges_pattern_files(self, tmp_path):
        (tmp_path / ".worktreeinclude").write_text(".env\n# c\nconfig/*\n")
        (tmp_path / ".spacesinclude").write_text("*.local\n.env\n")
        store = ConfigStore.in_memory(local={"spaces.copy.include": ["a", ".env"]})
        assert collect_includes(store, tmp_path) == ["a", ".env", "config/*", "*.local"]

    def test_seed_space_files_then_dirs(self, tmp_path):
        src, dst = tmp_path / "s", tmp_path / "d"
        (src / "node_modules" / "p").mkdir(parents=True)
        (src / "node_modules" / "p" / "i.js").write_text("js")
        (src / ".env").write_text("e")
        (src / "skip.env").write_text("e")
        dst.mkdir()
        store = ConfigStore.in_memory(
            local={
                "spaces.copy.include": ["*.env"],
                "spaces.copy.exclude": ["skip.env"],
                "spaces.copy.includeDirs": ["node_modules"],
            },
        )
        files, dirs = seed_space(store, src, dst)
        assert files.paths() == [".env"]
        assert dirs.paths() == ["node_modules"]
        assert (dst / "node_modules" / "p" / "i.js").read_text() == "js"
        assert not (dst / "skip.env").exists()

    def test_seed_space_dry_run(self, tmp_path):
        src, dst = tmp_path / "s", tmp_path / "d"
        src.mkdir()
        dst.mkdir()
        (src / ".env").write_text("e")
        store = ConfigStore.in_memory(local={"spaces.copy.include": [".env"]})
        files, dirs = seed_space(store, src, dst, dry_run=True)
        assert files.count == 1
        assert dirs.count == 0
        assert list(dst.iterdir()) == []


# ---------------------------------------------------------------------------
# Creating spaces (real git)
# ---------------------------------------------------------------------------

@requires_git
class TestCreateSpace:
    def _layout(self, git_repo):
        store = ConfigStore.for_repo(git_repo, env={})
        return store, Layout.resolve(store, git_repo)

    def test_create_new_branch(self, git_repo):
        git("config", "--local", "--add", "spaces.copy.include", ".env", cwd=git_repo)
        git("config", "--local", "--add", "spaces.hook.postCreate",
            'echo "$SPACE:$BRANCH" > hook.txt', cwd=git_repo)
        store, layout = self._layout(git_repo)

        path = create_space(store, layout, "feature/one", branch="feature-one")

        assert path == git_repo.parent / "repo-clones" / "feature-one"
        assert (path / ".git").exists()
        assert (path / "README.md").read_text() == "hello\n"
        assert (path / ".env").read_text() == "SECRET=1\n"
        assert current_branch(path) == "feature-one"
        assert (path / "hook.txt").read_text().strip() == "feature/one:feature-one"
        assert layout.mirror_dir.exists()

    def test_create_without_branch(self, git_repo):
        store, layout = self._layout(git_repo)
        path = create_space(store, layout, "plain", fetch=False, copy=False)
        assert current_branch(path) == "main"
        assert not (path / ".env").exists()

    def test_existing_local_branch(self, git_repo):
        git("branch", "topic", cwd=git_repo)
        store, layout = self._layout(git_repo)
        path = create_space(store, layout, "topic", branch="topic")
        assert current_branch(path) == "topic"

    def test_from_base_ref(self, git_repo):
        (git_repo / "more.txt").write_text("more")
        git("checkout", "-q", "-b", "base", cwd=git_repo)
        git("add", "more.txt", cwd=git_repo)
        git("commit", "-q", "-m", "more", cwd=git_repo)
        git("checkout", "-q", "main", cwd=git_repo)
        store, layout = self._layout(git_repo)
        path = create_space(store, layout, "n", branch="brand-new", base_ref="origin/base")
        assert current_branch(path) == "brand-new"
        assert (path / "more.txt").exists()

    def test_from_requires_branch(self, git_repo):
        store, layout = self._layout(git_repo)
        with pytest.raises(SpacesError):
            create_space(store, layout, "x", base_ref="main")
        assert not layout.clones_dir.exists()

    def test_existing_clone_rejected(self, git_repo):
        store, layout = self._layout(git_repo)
        create_space(store, layout, "dup", fetch=False)
        with pytest.raises(SpacesError):
            create_space(store, layout, "dup", fetch=False)

    def test_invalid_name(self, git_repo):
        store, layout = self._layout(git_repo)
        with pytest.raises(SpacesError):
            create_space(store, layout, "///")

    def test_create_then_remove(self, git_repo):
        store, layout = self._layout(git_repo)
        path = create_space(store, layout, "tmp", fetch=False)
        remove_space(store, layout, _target(path, name="tmp"))
        assert not path.exists()
        assert layout.mirror_dir.exists()

    def test_merged_scan_skips_detached(self, git_repo):
        store, layout = self._layout(git_repo)
        path = create_space(store, layout, "det", fetch=False)
        git("checkout", "-q", "--detach", cwd=path)
        create_space(store, layout, "onmain", fetch=False)
        scan = find_merged_spaces(layout)
        assert scan.candidates == []
        assert scan.skipped == 1
