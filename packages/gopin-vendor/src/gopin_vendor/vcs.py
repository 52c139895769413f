# SPDX-License-Identifier: MIT
"""Version control adapters.

Each supported version control system is described by a VCS value holding the
commands used to identify, describe and diff a working copy. The adapter for a
directory is chosen by looking for the system's metadata directory (``.git``,
``.hg``, ``.bzr``) in the directory and its ancestors.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import GopinError

logger = logging.getLogger(__name__)


class VCSError(GopinError):
    """Raised when a repository cannot be found or a VCS command fails."""

    pass


@dataclass(frozen=True)
class VCS:
    """Commands for one version control system.

    Command templates are argument lists; ``{rev}`` is replaced with the
    revision being inspected.

    Attributes:
        name: Human-readable name, used in error messages
        cmd: Executable name
        marker: Metadata directory that identifies a repository root
        identify_cmd: Prints the current revision
        describe_cmd: Prints a tag or description of a revision
        diff_cmd: Prints differences between the working tree and a revision
        create_cmd: Creates a new repository; empty when the sandbox copy
            workflow is not supported for this system
    """

    name: str
    cmd: str
    marker: str
    identify_cmd: tuple[str, ...]
    describe_cmd: tuple[str, ...]
    diff_cmd: tuple[str, ...]
    create_cmd: tuple[str, ...] = ()

    @property
    def supports_sandbox(self) -> bool:
        """Whether vendored copies of this system's repositories are supported."""
        return bool(self.create_cmd)

    def run(self, dir: str | Path, template: tuple[str, ...], rev: str = "") -> str:
        """Run a command template in ``dir`` and return its standard output.

        Raises:
            VCSError: If the command cannot be run or exits non-zero
        """
        args = [self.cmd] + [arg.replace("{rev}", rev) for arg in template]
        logger.debug("running %s in %s", " ".join(args), dir)
        try:
            result = subprocess.run(
                args,
                cwd=str(dir),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise VCSError(f"{self.name} executable not found: {self.cmd}") from None
        if result.returncode != 0:
            raise VCSError(f"{' '.join(args)} in {dir}: {result.stderr.strip()}")
        return result.stdout

    def identify(self, dir: str | Path) -> str:
        """Return the revision currently checked out in ``dir``."""
        return self.run(dir, self.identify_cmd).strip()

    def describe(self, dir: str | Path, rev: str) -> str:
        """Return a human-readable tag for ``rev``, or "" if there is none."""
        try:
            return self.run(dir, self.describe_cmd, rev).strip()
        except VCSError as e:
            logger.debug("no description for %s: %s", rev, e)
            return ""

    def is_dirty(self, dir: str | Path, rev: str) -> bool:
        """Report whether the working tree in ``dir`` differs from ``rev``."""
        try:
            out = self.run(dir, self.diff_cmd, rev)
        except VCSError:
            return True
        return bool(out)


GIT = VCS(
    name="git",
    cmd="git",
    marker=".git",
    identify_cmd=("rev-parse", "HEAD"),
    describe_cmd=("describe", "--tags", "{rev}"),
    diff_cmd=("diff", "{rev}"),
    create_cmd=("init",),
)

HG = VCS(
    name="mercurial",
    cmd="hg",
    marker=".hg",
    identify_cmd=("identify", "--id", "--debug"),
    describe_cmd=("log", "-r", "{rev}", "--template", "{latesttag}-{latesttagdistance}"),
    diff_cmd=("diff", "-r", "{rev}"),
    create_cmd=("init",),
)

BZR = VCS(
    name="bazaar",
    cmd="bzr",
    marker=".bzr",
    identify_cmd=("version-info", "--custom", "--template", "{revision_id}"),
    describe_cmd=("revno",),
    diff_cmd=("diff", "-r", "{rev}"),
)

VCS_LIST: tuple[VCS, ...] = (GIT, HG, BZR)


def vcs_from_dir(dir: str | Path, src_root: str | Path) -> tuple[VCS, str]:
    """Find the repository that contains ``dir``.

    The search walks from ``dir`` towards ``src_root`` and stops before
    reaching it.

    Args:
        dir: Directory of a package
        src_root: The ``src`` directory of the workspace containing ``dir``

    Returns:
        Tuple of (vcs, repository root import path relative to ``src_root``)

    Raises:
        VCSError: If ``dir`` is outside ``src_root`` or no repository is found
    """
    directory = os.path.normpath(str(dir))
    root = os.path.normpath(str(src_root))
    if len(directory) <= len(root) or not directory.startswith(root + os.sep):
        raise VCSError(f"directory {directory!r} is outside source root {root!r}")

    current = directory
    while len(current) > len(root):
        for vcs in VCS_LIST:
            if os.path.exists(os.path.join(current, vcs.marker)):
                rel = current[len(root) + 1:]
                return vcs, rel.replace(os.sep, "/")
        parent = os.path.dirname(current)
        if len(parent) >= len(current):
            break
        current = parent

    raise VCSError(f"directory {directory!r} is not using a known version control system")
