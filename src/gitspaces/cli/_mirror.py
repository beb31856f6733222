"""The mirrors command group."""

from __future__ import annotations

import click

from .. import _ui
from ..mirror import ensure_mirror, mirror_status, update_mirror
from ._helpers import main, _handle_errors, _open


@main.group(invoke_without_command=True)
@click.pass_context
@_handle_errors
def mirrors(ctx):
    """Show the shared mirror, or manage it with a subcommand."""
    if ctx.invoked_subcommand is not None:
        return
    _store, layout = _open(ctx)
    status = mirror_status(layout.mirror_dir)
    click.echo(f"{status.path}\t{status.label}")


@mirrors.command()
@click.pass_context
@_handle_errors
def update(ctx):
    """Create the mirror if needed, then fetch into it."""
    _store, layout = _open(ctx)
    ensure_mirror(layout.repo_root, layout.mirror_dir)
    _ui.step(f"Updating mirror: {layout.mirror_dir}")
    update_mirror(layout.repo_root, layout.mirror_dir)
    _ui.info("Mirror updated")
