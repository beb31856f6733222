"""The copy command: seed files from one space into others."""

from __future__ import annotations

import click

from .. import _ui
from ..config import KEY_COPY_EXCLUDE
from ..copy import copy_files
from ..exceptions import SpacesError
from ..lifecycle import collect_includes, report_copy
from ..targets import MAIN_ID, list_clone_dirs, space_name
from ._helpers import (
    main,
    SpacesClickError,
    _dry_run_option,
    _handle_errors,
    _open,
    _resolve,
)


@main.command()
@click.argument("targets", nargs=-1)
@click.option("--from", "source", default=MAIN_ID, show_default=True,
              help="Space to copy from.")
@click.option("-a", "--all", "all_spaces", is_flag=True, default=False,
              help="Copy into every space clone.")
@click.option("-p", "--pattern", "patterns", multiple=True,
              help="Glob pattern to copy (repeatable). Defaults to the configured includes.")
@_dry_run_option
@click.pass_context
@_handle_errors
def copy(ctx, targets, source, all_spaces, patterns, dry_run):
    """Copy matching files from one space into others.

    \b
    Examples:
      spaces copy feature-x -p .env -p 'config/*.local'
      spaces copy --all --dry-run
      spaces copy --from feature-x 1 -p .env
    """
    store, layout = _open(ctx)
    if not targets and not all_spaces:
        raise click.UsageError("Specify target space(s) or --all", ctx=ctx)

    src = _resolve(layout, source)
    if all_spaces:
        identifiers = [space_name(p, layout.prefix) for p in list_clone_dirs(layout.clones_dir, layout.prefix)]
        if not identifiers:
            _ui.warn("No space clones found")
            return
    else:
        identifiers = list(targets)

    includes = list(patterns) if patterns else collect_includes(store, layout.repo_root)
    if not includes:
        raise SpacesError(
            "No patterns given and none configured (spaces.copy.include, .worktreeinclude)"
        )
    excludes = store.get_all(KEY_COPY_EXCLUDE)

    failed = 0
    total = 0
    for identifier in identifiers:
        try:
            dst = _resolve(layout, identifier)
        except SpacesError as exc:
            _ui.error(str(exc))
            failed += 1
            continue
        if dst.path.resolve() == src.path.resolve():
            _ui.warn(f"Skipping {dst.name}: same as source")
            continue

        _ui.step(f"Copying from {src.name} to {dst.name}")
        report = copy_files(src.path, dst.path, includes, excludes, dry_run=dry_run)
        report_copy(report)
        total += report.count

    if not total and not failed:
        _ui.warn("No files matched")
    if failed:
        raise SpacesClickError(f"{failed} target(s) could not be resolved")
