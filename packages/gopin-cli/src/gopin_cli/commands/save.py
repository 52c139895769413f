# SPDX-License-Identifier: MIT
"""Save a project's dependencies into Deps/."""

from __future__ import annotations

from typing import Optional

import click

from gopin_manifest import ManifestError
from gopin_vendor import GopinError
from gopin_vendor.save import save as save_dependencies

from ..config import ConfigError
from ..main import echo_error, echo_info, echo_success, pass_context, Context


@click.command()
@click.option(
    "-r",
    "--rewrite",
    is_flag=True,
    default=None,
    help="Rewrite import paths of dependencies to point into Deps/_workspace.",
)
@click.option(
    "--copy/--no-copy",
    default=None,
    help="Deprecated; dependency sources are always copied.",
)
@click.argument("packages", nargs=-1)
@pass_context
def save(
    ctx: Context,
    rewrite: Optional[bool],
    copy: Optional[bool],
    packages: tuple[str, ...],
) -> None:
    """Save the dependencies of the project in the current directory.

    Records the checked-out revision of every dependency in Deps/Deps.json
    and copies the dependency sources into Deps/_workspace/src. With -r,
    imports of dependencies are rewritten to refer to the copies.

    \b
    Examples:
        gopin save              # Save the package in the current directory
        gopin save ./...        # Save every package of the project
        gopin save -r ./...     # Also rewrite imports
    """
    try:
        cli_config = ctx.load_config()
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1)

    config = cli_config.save_config(packages, rewrite=rewrite, copy=copy)

    try:
        result = save_dependencies(config)
    except (GopinError, ManifestError) as e:
        echo_error(str(e))
        raise SystemExit(1)

    if ctx.verbose:
        for dep in result.added:
            echo_info(f"  added {dep.import_path} {dep.rev}")
        for dep in result.removed:
            echo_info(f"  removed {dep.import_path}")
        for rewritten in result.rewritten:
            echo_info(f"  rewrote {rewritten.path}")

    count = len(result.manifest.deps)
    noun = "dependency" if count == 1 else "dependencies"
    echo_success(f"Saved {count} {noun} to {result.manifest_path}")
