# SPDX-License-Identifier: MIT
"""Reconciliation of freshly resolved dependencies with a saved manifest.

Pinned revisions only move when the working copy itself moved: a dependency
already in the old manifest keeps its recorded revision, and a newly seen
package from a repository that is already pinned must match that pin.
"""

from __future__ import annotations

import logging
from typing import Iterable

from gopin_manifest import Dependency, Manifest

from .exceptions import GopinError

logger = logging.getLogger(__name__)


class ReconcileError(GopinError):
    """Raised when a new manifest cannot be merged with the old one."""

    pass


class RevisionMismatchError(ReconcileError):
    """Raised when one repository is observed at two different revisions.

    Attributes:
        import_path: The package whose revision does not match
        have_rev: The freshly observed revision
        want_rev: The revision already pinned for the same repository
    """

    def __init__(self, import_path: str, have_rev: str, want_rev: str):
        self.import_path = import_path
        self.have_rev = have_rev
        self.want_rev = want_rev
        super().__init__(f"{import_path}: revision is {have_rev}, want {want_rev}")


class UnsupportedVCSError(ReconcileError):
    """Raised when dependencies use a VCS the vendor workflow cannot handle.

    Attributes:
        names: Sorted, de-duplicated VCS names
    """

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Unsupported sandbox VCS: {', '.join(names)}")


def carry_version(old: Manifest, dep: Dependency) -> None:
    """Copy the pinned revision for ``dep`` out of ``old``.

    Raises:
        RevisionMismatchError: If ``dep`` belongs to a repository pinned in
            ``old`` at a different revision
    """
    pinned = old.get(dep.import_path)
    if pinned is not None:
        dep.rev = pinned.rev
        dep.comment = pinned.comment
        return

    # No exact match. A child or sibling package of something already pinned
    # comes from the same repository and must be at the same revision.
    for other in old.deps:
        if dep.import_path.startswith(other.import_path + "/"):
            if other.rev != dep.rev:
                raise RevisionMismatchError(dep.import_path, dep.rev, other.rev)
        elif dep.root and other.import_path.startswith(dep.root + "/"):
            if other.rev != dep.rev:
                raise RevisionMismatchError(dep.import_path, dep.rev, other.rev)


def carry_versions(old: Manifest, new: Manifest) -> None:
    """Apply carry_version to every dependency of ``new``."""
    for dep in new.deps:
        carry_version(old, dep)


def carry_vendored(old: Manifest, import_paths: Iterable[str]) -> list[Dependency]:
    """Return the pinned entries of packages that resolved to the vendor workspace.

    Such packages have no repository to identify, so the pin recorded in
    ``old`` is kept as it is. A vendored package missing from ``old`` is
    logged and left out.
    """
    carried: list[Dependency] = []
    for import_path in dict.fromkeys(import_paths):
        pinned = old.get(import_path)
        if pinned is None:
            logger.warning("vendored package %s is not in the manifest", import_path)
            continue
        carried.append(
            Dependency(import_path=pinned.import_path, comment=pinned.comment, rev=pinned.rev)
        )
    return carried


def sub_deps(a: Iterable[Dependency], b: Iterable[Dependency]) -> list[Dependency]:
    """Return the dependencies of ``a`` not in ``b``, compared by import path."""
    exclude = {dep.import_path for dep in b}
    return [dep for dep in a if dep.import_path not in exclude]


def bad_sandbox_vcs(deps: Iterable[Dependency]) -> list[str]:
    """Return the sorted names of VCSes that the vendor workflow cannot handle."""
    names = {dep.vcs.name for dep in deps if dep.vcs is not None and not dep.vcs.supports_sandbox}
    return sorted(names)


def check_revisions(deps: Iterable[Dependency]) -> None:
    """Ensure dependencies sharing a repository root share a revision.

    Raises:
        RevisionMismatchError: Naming the first conflicting package and both
            revisions
    """
    seen: dict[str, str] = {}
    for dep in deps:
        if not dep.root:
            continue
        want = seen.setdefault(dep.root, dep.rev)
        if want != dep.rev:
            raise RevisionMismatchError(dep.import_path, dep.rev, want)


def reconcile(old: Manifest, new: Manifest) -> Manifest:
    """Merge the pinned revisions of ``old`` into ``new``.

    ``new`` is updated in place and returned. Nothing is written to disk.

    Raises:
        UnsupportedVCSError: If any dependency uses a VCS without sandbox support
        RevisionMismatchError: If a repository would be pinned at two revisions
    """
    if new.deps is None:
        new.deps = []

    bad = bad_sandbox_vcs(new.deps)
    if bad:
        raise UnsupportedVCSError(bad)

    check_revisions(new.deps)
    carry_versions(old, new)
    return new
