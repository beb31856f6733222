"""Housekeeping commands: clean, doctor."""

from __future__ import annotations

import click

from .. import _git, _ui
from ..exceptions import SpacesError
from ..lifecycle import find_merged_spaces, gh_available, remove_empty_dirs, remove_space
from ..mirror import mirror_status
from ..paths import default_branch
from ..targets import Target
from ._helpers import (
    main,
    _dry_run_option,
    _handle_errors,
    _open,
    _yes_option,
)


@main.command()
@click.option("--merged", is_flag=True, default=False,
              help="Also remove clones whose branch has a merged pull request.")
@_yes_option
@_dry_run_option
@click.pass_context
@_handle_errors
def clean(ctx, merged, yes, dry_run):
    """Remove empty directories (and optionally merged spaces).

    \b
    --merged needs the GitHub CLI ("gh").  Detached and dirty clones are
    never removed.
    """
    store, layout = _open(ctx)

    _ui.step("Cleaning empty directories...")
    for path in remove_empty_dirs(layout.clones_dir, dry_run=dry_run):
        if dry_run:
            _ui.info(f"[dry-run] Would remove empty directory: {path}")
        else:
            _ui.info(f"Removed empty directory: {path}")

    if not merged:
        return

    if not gh_available(layout.repo_root):
        raise SpacesError("GitHub CLI (gh) not available or not authenticated")

    _ui.step("Checking for merged branches...")
    scan = find_merged_spaces(layout)
    if scan.skipped:
        _ui.warn(f"Skipped {scan.skipped} detached or dirty clone(s)")
    if not scan.candidates:
        _ui.info("No merged spaces found")
        return

    removed = 0
    for candidate in scan.candidates:
        if dry_run:
            _ui.info(f"[dry-run] Would remove {candidate.name} ({candidate.branch})")
            continue
        if not yes and not click.confirm(
            f"Remove '{candidate.name}' (branch {candidate.branch} merged)?", default=False,
        ):
            continue
        target = Target(is_main=False, path=candidate.path, name=candidate.name,
                        branch=candidate.branch)
        try:
            remove_space(store, layout, target)
        except SpacesError as exc:
            _ui.error(str(exc))
            continue
        removed += 1
    if not dry_run:
        _ui.info(f"Removed {removed} merged space(s)")


@main.command()
@click.pass_context
@_handle_errors
def doctor(ctx):
    """Show the environment spaces runs in."""
    store, layout = _open(ctx)
    version = _git.stdout_opt(["--version"]) or "not found"
    status = mirror_status(layout.mirror_dir)

    _ui.step("spaces doctor")
    click.echo(f"git:            {version}")
    click.echo(f"repository:     {layout.repo_root}")
    click.echo(f"clones dir:     {layout.clones_dir}")
    click.echo(f"clones prefix:  {layout.prefix or '(none)'}")
    click.echo(f"mirrors dir:    {layout.mirror_dir}")
    click.echo(f"mirror:         {status.label}")
    click.echo(f"default branch: {default_branch(store, layout.repo_root)}")
