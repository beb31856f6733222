"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import functools

import click

from .. import _ui
from ..config import ConfigStore, Scope
from ..exceptions import SpacesError
from ..paths import Layout, repo_root
from ..targets import Target, resolve_target


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class SpacesClickError(click.ClickException):
    """ClickException rendered with the ``[x]`` error prefix."""

    def show(self, file=None):
        _ui.error(self.format_message())


def _handle_errors(f):
    """Turn library :class:`SpacesError` exceptions into CLI errors."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SpacesError as exc:
            raise SpacesClickError(str(exc)) from exc
    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _open(ctx) -> tuple[ConfigStore, Layout]:
    """Locate the repository and build its config store and layout (cached)."""
    if "layout" not in ctx.obj:
        root = repo_root(ctx.obj.get("repo_path"))
        store = ConfigStore.for_repo(root)
        ctx.obj["store"] = store
        ctx.obj["layout"] = Layout.resolve(store, root)
        _status(ctx, f"Repository: {root}")
    return ctx.obj["store"], ctx.obj["layout"]


def _resolve(layout: Layout, identifier: str) -> Target:
    return resolve_target(identifier, layout.repo_root, layout.clones_dir, layout.prefix)


def _parse_scope(value: str | None) -> Scope:
    return Scope(value) if value else Scope.AUTO


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

def _yes_option(f):
    """Shared --yes flag: never prompt."""
    return click.option(
        "-y", "--yes", is_flag=True, default=False,
        help="Assume yes; never prompt.",
    )(f)


def _dry_run_option(f):
    return click.option(
        "-n", "--dry-run", "dry_run", is_flag=True, default=False,
        help="Show what would happen without changing anything.",
    )(f)


def _scope_options(f):
    """--local / --global / --system, stored together as ``scope``."""
    f = click.option("--system", "scope", flag_value="system",
                     help="Use the system git config.")(f)
    f = click.option("--global", "scope", flag_value="global",
                     help="Use the global (per-user) git config.")(f)
    f = click.option("--local", "scope", flag_value="local",
                     help="Use the repository's own git config.")(f)
    return f


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("-C", "--repo", "repo_path", type=click.Path(file_okay=False),
              envvar="SPACES_REPO",
              help="Run as if started in this directory (or set SPACES_REPO).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, repo_path, verbose):
    """spaces: disposable clones of a git repository.

    Each space is a full clone that borrows objects from a shared local
    mirror, so creating one needs no network round trip.

    \b
    Quick start:
      spaces new feature-x -b feature-x
      spaces list
      cd "$(spaces go feature-x)"
      spaces rm feature-x

    \b
    Common workflows:
      new / rm / clean      Create and remove spaces
      go / run / list       Find and use spaces
      copy                  Seed files from one space into others
      config / mirrors      Inspect settings and the shared mirror

    \b
    The main repository is always addressable as "1".
    """
    ctx.ensure_object(dict)
    ctx.obj["repo_path"] = repo_path
    ctx.obj["verbose"] = verbose
