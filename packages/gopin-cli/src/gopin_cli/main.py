# SPDX-License-Identifier: MIT
"""CLI entry point for the gopin command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import CLIConfig, ConfigError, load_config

LOG_FORMAT = "gopin: %(message)s"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[CLIConfig] = None
        self.verbose: bool = False
        self.project_dir: Optional[Path] = None

    def load_config(self) -> CLIConfig:
        """Load configuration, caching the result."""
        if self.config is None:
            self.config = load_config(self.project_dir)
        return self.config


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr, prefixed with the tool name."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version=__version__, prog_name="gopin")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Change to directory before running command.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Go dependency pinning and vendoring tool.

    Records the revisions of a project's dependencies in Deps/Deps.json and
    copies their sources into Deps/_workspace.

    \b
    Examples:
        gopin save
        gopin save -r ./...
        gopin go build
        gopin path
    """
    ctx.verbose = verbose
    ctx.project_dir = directory
    configure_logging(verbose)


# Import and register commands
from .commands import go, path, save, version

cli.add_command(save.save)
cli.add_command(path.path)
cli.add_command(go.go)
cli.add_command(version.version)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
