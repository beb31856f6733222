"""Space commands: new, rm, go, run, list."""

from __future__ import annotations

import subprocess

import click

from .. import _ui
from ..exceptions import SpacesError
from ..lifecycle import create_space, remove_space
from ..targets import DETACHED, current_branch, list_clone_dirs, space_name, space_status
from ._helpers import (
    main,
    SpacesClickError,
    _handle_errors,
    _open,
    _resolve,
    _status,
    _yes_option,
)


# ---------------------------------------------------------------------------
# new
# ---------------------------------------------------------------------------

@main.command()
@click.argument("name", required=False)
@click.option("-b", "--branch", default=None, help="Branch to check out (created if needed).")
@click.option("--from", "base_ref", default=None,
              help="Start a new branch from this ref (requires --branch).")
@click.option("--no-fetch", is_flag=True, default=False, help="Do not refresh the mirror first.")
@click.option("--no-copy", is_flag=True, default=False, help="Do not seed configured files.")
@_yes_option
@click.pass_context
@_handle_errors
def new(ctx, name, branch, base_ref, no_fetch, no_copy, yes):
    """Create a new space clone.

    \b
    The branch is resolved in order:
      1. an existing remote branch (tracked),
      2. an existing local branch,
      3. a new branch from --from or the default branch.
    """
    if base_ref and not branch:
        raise click.UsageError("--from requires --branch", ctx=ctx)

    store, layout = _open(ctx)

    if not name:
        if yes:
            raise click.UsageError("Space name required in non-interactive mode", ctx=ctx)
        name = click.prompt("Enter space name", default="", show_default=False).strip()
        if not name:
            raise click.UsageError("Space name required", ctx=ctx)

    path = create_space(
        store, layout, name,
        branch=branch, base_ref=base_ref,
        fetch=not no_fetch, copy=not no_copy,
    )
    _status(ctx, f"Created {path}")


# ---------------------------------------------------------------------------
# rm
# ---------------------------------------------------------------------------

@main.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("-f", "--force", is_flag=True, default=False,
              help="Remove even if a preRemove hook fails.")
@_yes_option
@click.pass_context
@_handle_errors
def rm(ctx, targets, force, yes):
    """Remove space clone(s) by name or id.

    Failures on one target are reported and the rest are still processed.
    """
    store, layout = _open(ctx)
    failed = 0
    for identifier in targets:
        try:
            target = _resolve(layout, identifier)
            if target.is_main:
                raise SpacesError("Cannot remove main repository")
            if not yes and not click.confirm(f"Remove space '{target.name}'?", default=False):
                _ui.warn(f"Skipped: {target.name}")
                continue
            remove_space(store, layout, target, force=force)
        except SpacesError as exc:
            _ui.error(str(exc))
            failed += 1
    if failed:
        raise SpacesClickError(f"{failed} of {len(targets)} target(s) not removed")


# ---------------------------------------------------------------------------
# go
# ---------------------------------------------------------------------------

@main.command()
@click.argument("identifier")
@click.pass_context
@_handle_errors
def go(ctx, identifier):
    """Print the path of a space (or "1" for the main repo)."""
    _store, layout = _open(ctx)
    target = _resolve(layout, identifier)
    if target.is_main:
        _ui.detail("Main repo")
    else:
        _ui.detail(f"Space: {target.name}")
    _ui.detail(f"Branch: {target.branch}")
    click.echo(str(target.path))


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

@main.command("run", context_settings={"ignore_unknown_options": True,
                                       "allow_interspersed_args": False})
@click.argument("identifier")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
@_handle_errors
def run_cmd(ctx, identifier, command):
    """Run a command inside a space.

        spaces run feature-x -- make test
    """
    if not command:
        raise click.UsageError("Usage: spaces run <space|id> -- <command...>", ctx=ctx)
    _store, layout = _open(ctx)
    target = _resolve(layout, identifier)

    _ui.step(f"Running in: {target.name}")
    _ui.detail(f"Command: {' '.join(command)}")
    _ui.detail()
    try:
        proc = subprocess.run(list(command), cwd=target.path)
    except OSError as exc:
        raise SpacesError(f"Command failed: {exc}") from exc
    if proc.returncode != 0:
        raise SpacesError("Command failed")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

@main.command("list")
@click.option("--porcelain", is_flag=True, default=False,
              help="Tab-separated path, name, branch, status.")
@click.pass_context
@_handle_errors
def list_cmd(ctx, porcelain):
    """List the main repository and its space clones."""
    _store, layout = _open(ctx)
    root = layout.repo_root
    clones = list_clone_dirs(layout.clones_dir, layout.prefix)

    if porcelain:
        branch = current_branch(root) or DETACHED
        click.echo(f"{root}\tmain\t{branch}\t{space_status(root)}")
        for path in clones:
            branch = current_branch(path) or DETACHED
            name = space_name(path, layout.prefix)
            click.echo(f"{path}\t{name}\t{branch}\t{space_status(path)}")
        return

    click.echo("Spaces")
    click.echo()
    click.echo(f"{'SPACE':<24} {'BRANCH':<24} PATH")
    click.echo(f"{'-----':<24} {'------':<24} ----")
    click.echo(f"{'main':<24} {current_branch(root) or DETACHED:<24} {root}")

    rows = sorted(
        (space_name(path, layout.prefix), current_branch(path) or DETACHED, path)
        for path in clones
    )
    for name, branch, path in rows:
        click.echo(f"{name:<24} {branch:<24} {path}")

    click.echo()
    click.echo("Tip: Use 'spaces list --porcelain' for machine-readable output")
