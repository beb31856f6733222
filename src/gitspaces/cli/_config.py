"""The config command group."""

from __future__ import annotations

import sys

import click

from .. import _ui
from ._helpers import main, _handle_errors, _open, _parse_scope, _scope_options


@main.group("config", invoke_without_command=True)
@_scope_options
@click.pass_context
@_handle_errors
def config_group(ctx, scope):
    """Read and write spaces.* settings.

    \b
    Without a subcommand, lists the settings.  Reads default to every
    source (local, .spacesrc, global, system); writes default to the
    repository's local config.  --system is read-only.
    """
    ctx.obj["config_scope"] = scope
    if ctx.invoked_subcommand is None:
        ctx.invoke(config_list, scope=scope)


@config_group.command("list")
@_scope_options
@click.pass_context
@_handle_errors
def config_list(ctx, scope):
    """List settings with their source."""
    store, _layout = _open(ctx)
    lines = store.list(_parse_scope(scope or ctx.obj.get("config_scope")))
    if not lines:
        _ui.info("No spaces configuration found")
        return
    for line in lines:
        click.echo(line)


@config_group.command("get")
@click.argument("key")
@_scope_options
@click.pass_context
@_handle_errors
def config_get(ctx, key, scope):
    """Print every value of KEY, one per line (exit 1 if unset).

    Without a scope flag the values of all sources are shown, .spacesrc
    included.
    """
    store, _layout = _open(ctx)
    values = store.get_all(key, _parse_scope(scope or ctx.obj.get("config_scope")))
    if not values:
        sys.exit(1)
    for value in values:
        click.echo(value)


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@_scope_options
@click.pass_context
@_handle_errors
def config_set(ctx, key, value, scope):
    """Set KEY to VALUE, replacing any existing values."""
    store, _layout = _open(ctx)
    written = store.set(key, value, _parse_scope(scope or ctx.obj.get("config_scope")))
    _ui.info(f"Set {key}={value} [{written}]")


@config_group.command("add")
@click.argument("key")
@click.argument("value")
@_scope_options
@click.pass_context
@_handle_errors
def config_add(ctx, key, value, scope):
    """Append VALUE to multi-valued KEY."""
    store, _layout = _open(ctx)
    written = store.add(key, value, _parse_scope(scope or ctx.obj.get("config_scope")))
    _ui.info(f"Added {key}={value} [{written}]")


@config_group.command("unset")
@click.argument("key")
@_scope_options
@click.pass_context
@_handle_errors
def config_unset(ctx, key, scope):
    """Remove every value of KEY."""
    store, _layout = _open(ctx)
    written = store.unset(key, _parse_scope(scope or ctx.obj.get("config_scope")))
    _ui.info(f"Unset {key} [{written}]")
