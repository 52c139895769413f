# SPDX-License-Identifier: MIT
"""Show version information."""

from __future__ import annotations

import platform

import click

from gopin_vendor import PackageLoadError, go_version

from .. import __version__
from ..config import ConfigError
from ..main import echo_error, pass_context, Context


@click.command()
@pass_context
def version(ctx: Context) -> None:
    """Show the gopin version and the Go toolchain it runs."""
    try:
        config = ctx.load_config()
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)

    try:
        toolchain = go_version(config.go)
    except PackageLoadError:
        toolchain = "go unknown"

    system = platform.system().lower()
    machine = platform.machine().lower()
    click.echo(f"gopin v{__version__} ({system}/{machine}/{toolchain})")
