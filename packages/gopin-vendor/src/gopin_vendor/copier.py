# SPDX-License-Identifier: MIT
"""Copying dependency sources into the project's vendor workspace.

Each dependency's package directory is copied from its GOPATH workspace into
``Deps/_workspace/src`` at the same relative location, so the vendor
workspace can be used as a GOPATH entry.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable

from gopin_manifest import Dependency

from .exceptions import GopinError
from .paths import contains_path_prefix

logger = logging.getLogger(__name__)

# Contents of the ignore file written at the vendor workspace root
VCS_IGNORE = "/pkg\n/bin\n"


class VendorCopyError(GopinError):
    """Raised when copying sources into the vendor workspace fails.

    Attributes:
        errors: Every failure encountered, so the full extent is visible
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "error copying source code"
        if errors:
            message += ":\n  " + "\n  ".join(errors)
        super().__init__(message)


def _dest(dst_root: Path, import_path: str) -> Path:
    return dst_root.joinpath(*import_path.split("/"))


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def remove_src(dst_root: str | Path, deps: Iterable[Dependency]) -> None:
    """Remove the vendored copy of each dependency.

    Raises:
        VendorCopyError: If any copy could not be removed
    """
    root = Path(dst_root)
    errors: list[str] = []
    for dep in deps:
        try:
            _remove(_dest(root, dep.import_path))
        except OSError as e:
            logger.error("%s", e)
            errors.append(str(e))
    if errors:
        raise VendorCopyError(errors)


def copy_file(dst: str | Path, src: str | Path) -> None:
    """Copy a regular file or recreate a symlink at ``dst``.

    Symlinks are recreated with the same target string, never dereferenced.
    """
    dst_path = Path(dst)
    src_path = Path(src)
    dst_path.parent.mkdir(parents=True, exist_ok=True)

    if src_path.is_symlink():
        if dst_path.is_symlink() or dst_path.exists():
            dst_path.unlink()
        os.symlink(os.readlink(src_path), dst_path)
        return

    shutil.copyfile(src_path, dst_path)
    shutil.copymode(src_path, dst_path)


def _copy_package(dst_root: Path, src_root: Path, pkg_dir: Path, errors: list[str]) -> None:
    """Copy one package directory, recording failures instead of raising."""

    def onerror(e: OSError) -> None:
        logger.error("%s", e)
        errors.append(str(e))

    for dirpath, dirnames, filenames in os.walk(pkg_dir, onerror=onerror):
        # Same rule the go tool uses when enumerating packages
        dirnames[:] = sorted(d for d in dirnames if d[0] not in "._")
        current = Path(dirpath)

        # os.walk lists symlinks to directories as directories; copy them as links
        for name in list(dirnames):
            if (current / name).is_symlink():
                dirnames.remove(name)
                filenames.append(name)

        for name in sorted(filenames):
            src = current / name
            try:
                rel = src.relative_to(src_root)
            except ValueError as e:
                onerror(OSError(str(e)))
                continue
            try:
                copy_file(dst_root / rel, src)
            except OSError as e:
                onerror(e)


def copy_src(
    dst_root: str | Path, deps: Iterable[Dependency], keep: Iterable[str] = ()
) -> None:
    """Copy every dependency into ``dst_root``.

    The destination of each dependency's repository is removed first so that
    files from an older revision do not linger. A repository holding one of
    the already vendored packages in ``keep`` is copied over in place instead.

    Raises:
        VendorCopyError: Listing every failure, after all copies were attempted
    """
    root = Path(dst_root)
    deps = list(deps)
    kept = list(keep)
    errors: list[str] = []

    cleared: set[str] = set()
    for dep in deps:
        target = dep.root or dep.import_path
        if target in cleared:
            continue
        cleared.add(target)
        if any(contains_path_prefix([target], path) for path in kept):
            logger.debug("not clearing %s: it holds vendored packages", target)
            continue
        try:
            _remove(_dest(root, target))
        except OSError as e:
            logger.error("%s", e)
            errors.append(str(e))

    for dep in deps:
        src_root = Path(dep.workspace) / "src"
        logger.debug("copying %s from %s", dep.import_path, dep.dir)
        _copy_package(root, src_root, Path(dep.dir), errors)

    if errors:
        raise VendorCopyError(errors)


def write_vcs_ignore(directory: str | Path) -> None:
    """Write ignore files inside ``directory`` for known VCSes.

    This keeps ``pkg`` and ``bin`` build output in the vendor workspace from
    being committed by accident. Git is the only VCS handled; failures are
    logged and otherwise ignored.
    """
    path = Path(directory) / ".gitignore"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(VCS_IGNORE, encoding="utf-8")
    except OSError as e:
        logger.warning("could not write %s: %s", path, e)
