# SPDX-License-Identifier: MIT
"""Run the go tool with the vendor workspace on GOPATH."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import click

from ..config import ConfigError, load_config, find_project_root
from ..main import echo_error, pass_context, Context


def workspace_gopath(workspace: Path, gopath: str = "") -> str:
    """Return a GOPATH with ``workspace`` in front of ``gopath``."""
    if not gopath:
        return str(workspace)
    return os.pathsep.join([str(workspace), gopath])


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@pass_context
def go(ctx: Context, args: tuple[str, ...]) -> None:
    """Run go with Deps/_workspace prepended to GOPATH.

    The exit status of go is passed through.

    \b
    Examples:
        gopin go build
        gopin go test ./...
    """
    try:
        root = find_project_root(ctx.project_dir)
        config = load_config(root)
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)

    env = os.environ.copy()
    env["GOPATH"] = workspace_gopath(config.workspace_dir, env.get("GOPATH", ""))

    try:
        result = subprocess.run(
            [config.go, *args],
            cwd=str(ctx.project_dir) if ctx.project_dir else None,
            env=env,
            check=False,
        )
    except FileNotFoundError:
        echo_error(f"Go executable not found: {config.go}")
        raise SystemExit(1)

    raise SystemExit(result.returncode)
