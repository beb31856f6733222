"""Status output on stderr."""

from __future__ import annotations

import click


def step(msg: str) -> None:
    click.echo(click.style("==> ", fg="blue", bold=True) + msg, err=True)


def info(msg: str) -> None:
    click.echo(click.style("[OK]", fg="green") + " " + msg, err=True)


def warn(msg: str) -> None:
    click.echo(click.style("[!]", fg="yellow") + " " + msg, err=True)


def error(msg: str) -> None:
    click.echo(click.style("[x]", fg="red") + " " + msg, err=True)


def detail(msg: str = "") -> None:
    click.echo(msg, err=True)
