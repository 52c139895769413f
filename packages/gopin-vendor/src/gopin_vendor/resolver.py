# SPDX-License-Identifier: MIT
"""Dependency resolution over the Go package graph.

This module turns the packages named on the command line into the list of
external dependencies that must be vendored: standard-library packages and
packages living in the project's own repositories are filtered out, and every
remaining package is mapped to its owning repository and checked-out revision.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from gopin_manifest import Dependency

from .exceptions import GopinError
from .loader import GoPackage, PackageLoadError, PackageLoader
from .paths import contains_path_prefix, unqualify
from .vcs import VCS, VCSError, vcs_from_dir

logger = logging.getLogger(__name__)


class DependencyResolverError(GopinError):
    """Raised when one or more packages cannot be resolved.

    Attributes:
        errors: Every problem found during the resolve, in discovery order
    """

    def __init__(self, errors: list[str], summary: str = "error loading dependencies"):
        self.errors = errors
        message = summary
        if errors:
            message += ":\n  " + "\n  ".join(errors)
        super().__init__(message)


def _src_root(pkg: GoPackage) -> str:
    return os.path.join(pkg.root, "src")


def _is_within(path: str, directory: Path) -> bool:
    try:
        Path(path).resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True


class DependencyResolver:
    """Resolves the external dependencies of a set of root packages."""

    def __init__(
        self,
        load: PackageLoader,
        *,
        vendor_dir: Optional[str | Path] = None,
        vcs_lookup: Callable[[str | Path, str | Path], tuple[VCS, str]] = vcs_from_dir,
    ):
        """Initialize the resolver.

        Args:
            load: Package loader, called with import paths as positional args
            vendor_dir: The project's vendor ``src`` directory; packages found
                there are already vendored and are not resolved again
            vcs_lookup: Function mapping (package dir, src root) to
                (vcs, repository root import path)
        """
        self.load = load
        self.vendor_dir = Path(vendor_dir) if vendor_dir is not None else None
        self.vcs_lookup = vcs_lookup
        self.vendored: list[str] = []

    def resolve(self, packages: list[GoPackage]) -> list[Dependency]:
        """Resolve the dependencies of ``packages``.

        Returns one Dependency per external package import path. Packages
        from the same repository share ``root``, ``rev`` and ``comment``.
        Packages found inside the vendor workspace are not returned; their
        unqualified import paths are left in ``self.vendored``.

        Raises:
            DependencyResolverError: If any package or repository could not be
                resolved; all problems are collected before raising
        """
        self.vendored = []
        errors: list[str] = []
        project_roots: list[str] = []
        paths: list[str] = []

        for pkg in packages:
            if pkg.standard:
                logger.info("ignoring stdlib package: %s", pkg.import_path)
                continue
            if pkg.error:
                self._record(errors, pkg.error)
                continue
            try:
                _, root = self.vcs_lookup(pkg.dir, _src_root(pkg))
            except VCSError as e:
                self._record(errors, str(e))
                continue
            project_roots.append(root)
            paths.extend(pkg.deps)

        if errors:
            raise DependencyResolverError(errors, "error loading packages")

        paths.extend(self._test_dependencies(packages, errors))

        candidates = sorted({unqualify(p) for p in paths})
        loaded = self._load(*candidates) if candidates else []

        deps: list[Dependency] = []
        repos: dict[str, Optional[tuple[str, str]]] = {}

        for pkg in loaded:
            if pkg.error:
                self._record(errors, pkg.error)
                continue
            if pkg.standard or contains_path_prefix(project_roots, pkg.import_path):
                continue
            if self.vendor_dir is not None and _is_within(pkg.dir, self.vendor_dir):
                logger.debug("skipping already vendored package: %s", pkg.import_path)
                self.vendored.append(unqualify(pkg.import_path))
                continue
            try:
                vcs, root = self.vcs_lookup(pkg.dir, _src_root(pkg))
            except VCSError as e:
                self._record(errors, str(e))
                continue

            repo_dir = os.path.join(_src_root(pkg), *root.split("/"))
            if repo_dir not in repos:
                repos[repo_dir] = self._identify(vcs, repo_dir, errors)
            pinned = repos[repo_dir]
            if pinned is None:
                continue

            rev, comment = pinned
            deps.append(
                Dependency(
                    import_path=pkg.import_path,
                    comment=comment,
                    rev=rev,
                    root=root,
                    workspace=pkg.root,
                    dir=pkg.dir,
                    vcs=vcs,
                )
            )

        if errors:
            raise DependencyResolverError(errors)
        return deps

    def _test_dependencies(self, packages: list[GoPackage], errors: list[str]) -> list[str]:
        """Collect imports reachable only from the root packages' tests."""
        test_imports: list[str] = []
        for pkg in packages:
            test_imports.extend(pkg.test_imports)
            test_imports.extend(pkg.xtest_imports)
        if not test_imports:
            return []

        paths: list[str] = []
        for pkg in self._load(*sorted(set(test_imports))):
            if pkg.standard:
                continue
            if pkg.error:
                self._record(errors, pkg.error)
                continue
            paths.append(pkg.import_path)
            paths.extend(pkg.deps)
        return paths

    def _identify(
        self, vcs: VCS, repo_dir: str, errors: list[str]
    ) -> Optional[tuple[str, str]]:
        """Return (rev, comment) of a repository, or None after recording an error."""
        try:
            rev = vcs.identify(repo_dir)
        except VCSError as e:
            self._record(errors, str(e))
            return None
        if vcs.is_dirty(repo_dir, rev):
            self._record(errors, f"dirty working tree: {repo_dir}")
            return None
        return rev, vcs.describe(repo_dir, rev)

    def _load(self, *patterns: str) -> list[GoPackage]:
        try:
            return self.load(*patterns)
        except PackageLoadError as e:
            raise DependencyResolverError([str(e)], "error loading packages") from e

    @staticmethod
    def _record(errors: list[str], message: str) -> None:
        logger.error("%s", message)
        errors.append(message)
