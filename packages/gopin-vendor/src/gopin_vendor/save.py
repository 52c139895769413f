# SPDX-License-Identifier: MIT
"""The save operation: pin, vendor, and rewrite a project's dependencies.

Order of effects:

1. Load and resolve the package graph; reconcile it with the old manifest.
   Any failure here leaves the project untouched.
2. Plan the rewrite of the project's own files (parse errors abort here).
3. Copy dependency sources into the vendor workspace. Repositories kept at
   an older pin and packages that resolved to the workspace itself are
   left as they are.
4. Plan the rewrite of the vendor workspace.
5. Write the manifest, then apply the planned rewrites.

Files already written when step 5 fails are not rolled back, and concurrent
saves in the same project are not coordinated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gopin_manifest import Dependency, Manifest, read_manifest, write_manifest

from .config import SaveConfig
from .copier import copy_src, remove_src, write_vcs_ignore
from .exceptions import SaveError
from .loader import GoPackage, PackageLoader, go_version, load_packages
from .reconcile import RevisionMismatchError, carry_vendored, reconcile, sub_deps
from .resolver import DependencyResolver
from .rewriter import ImportRewriter, RewriteResult

logger = logging.getLogger(__name__)

COPY_WARNING = "deprecated flag -copy: dependency sources are always copied"


@dataclass
class SaveResult:
    """Outcome of a save.

    Attributes:
        manifest: The manifest that was written
        manifest_path: Where it was written
        added: Dependencies not present in the previous manifest
        removed: Dependencies dropped since the previous manifest
        rewritten: Files whose imports were rewritten
    """

    manifest: Manifest
    manifest_path: Path
    added: list[Dependency] = field(default_factory=list)
    removed: list[Dependency] = field(default_factory=list)
    rewritten: list[RewriteResult] = field(default_factory=list)


def _bound_loader(config: SaveConfig, load: Optional[PackageLoader]) -> PackageLoader:
    if load is not None:
        return load

    def _load(*patterns: str) -> list[GoPackage]:
        return load_packages(*patterns, go=config.go, cwd=config.project_dir, env=config.env)

    return _load


def read_old_manifest(path: Path) -> Manifest:
    """Read the previously saved manifest, or an empty one if there is none."""
    if not path.exists():
        return Manifest()
    return read_manifest(path)


def held_back_repositories(
    deps: list[Dependency], observed: dict[str, str], vendor_src_dir: Path
) -> set[str]:
    """Return the repositories whose vendored copy must stay at its pin.

    A dependency whose pinned revision differs from the checked-out one is
    not copied again, so the vendored sources keep matching the manifest.

    Raises:
        RevisionMismatchError: If such a dependency has no vendored copy to keep
    """
    held: set[str] = set()
    for dep in deps:
        have = observed.get(dep.import_path, dep.rev)
        if have == dep.rev:
            continue
        vendored = vendor_src_dir.joinpath(*dep.import_path.split("/"))
        if not vendored.is_dir():
            raise RevisionMismatchError(dep.import_path, have, dep.rev)
        logger.warning(
            "%s: checked out at %s, keeping vendored copy pinned at %s",
            dep.import_path,
            have,
            dep.rev,
        )
        held.add(dep.root or dep.import_path)
    return held


def save(
    config: SaveConfig,
    load: Optional[PackageLoader] = None,
    toolchain_version: Optional[str] = None,
) -> SaveResult:
    """Save the dependencies of the project described by ``config``.

    Args:
        config: Save configuration
        load: Package loader; defaults to ``go list`` run in the project dir
        toolchain_version: Value for GoVersion; defaults to ``go version``

    Returns:
        SaveResult describing what changed

    Raises:
        GopinError: Any resolution, reconciliation, copy or rewrite failure
        ManifestError: If the previous manifest is unreadable
    """
    if config.copy is not None:
        logger.warning(COPY_WARNING)

    loader = _bound_loader(config, load)

    dot = loader(".")
    if not dot:
        raise SaveError(f"no Go package found in {config.project_dir}")
    project = dot[0]
    if project.error:
        raise SaveError(project.error)

    if toolchain_version is None:
        toolchain_version = go_version(config.go, env=config.env)

    old = read_old_manifest(config.manifest_path)
    new = Manifest(
        import_path=project.import_path,
        go_version=toolchain_version,
        packages=list(config.packages),
    )

    packages = loader(*config.patterns)
    resolver = DependencyResolver(loader, vendor_dir=config.vendor_src_dir)
    fresh = resolver.resolve(packages)
    observed = {dep.import_path: dep.rev for dep in fresh}
    carried = carry_vendored(old, resolver.vendored)
    new.deps = fresh + carried
    reconcile(old, new)
    held = held_back_repositories(fresh, observed, config.vendor_src_dir)
    to_copy = [dep for dep in fresh if (dep.root or dep.import_path) not in held]

    rewrite_paths = [dep.import_path for dep in new.deps] if config.rewrite_transitive else []
    rewriter = ImportRewriter(new.import_path, rewrite_paths)

    project_files: list[Path] = []
    for pkg in packages:
        project_files.extend(pkg.file_paths())
    plans = rewriter.plan_files(project_files)

    removed = sub_deps(old.deps, new.deps)
    added = sub_deps(new.deps, old.deps)
    remove_src(config.vendor_src_dir, removed)
    if to_copy:
        copy_src(config.vendor_src_dir, to_copy, keep=[dep.import_path for dep in carried])
    if new.deps:
        write_vcs_ignore(config.workspace_dir)

    planned = {plan.path for plan in plans}
    if config.vendor_src_dir.is_dir():
        plans.extend(
            plan
            for plan in rewriter.plan_tree(config.vendor_src_dir)
            if plan.path not in planned
        )

    manifest_path = write_manifest(new, config.manifest_path)
    logger.info("wrote %s with %d dependencies", manifest_path, len(new.deps))

    rewritten = rewriter.apply(plans)

    return SaveResult(
        manifest=new,
        manifest_path=manifest_path,
        added=added,
        removed=removed,
        rewritten=rewritten,
    )
