# SPDX-License-Identifier: MIT
"""Print the vendor workspace path."""

from __future__ import annotations

import click

from ..config import ConfigError, load_config, find_project_root
from ..main import echo_error, pass_context, Context


@click.command()
@pass_context
def path(ctx: Context) -> None:
    """Print the path of the vendor workspace, for use in GOPATH.

    \b
    Examples:
        GOPATH=$(gopin path):$GOPATH go build
    """
    try:
        root = find_project_root(ctx.project_dir)
        config = load_config(root)
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)

    click.echo(str(config.workspace_dir))
