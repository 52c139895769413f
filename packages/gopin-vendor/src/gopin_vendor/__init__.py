# SPDX-License-Identifier: MIT
"""Dependency vendoring and import rewriting for Go projects.

This package pins the transitive dependencies of a Go project to their
checked-out revisions, copies them into the project's vendor workspace
(``Deps/_workspace``), and rewrites import paths to refer to the copies.

Example:
    >>> from gopin_vendor import SaveConfig, save
    >>>
    >>> config = SaveConfig(project_dir=".", rewrite_transitive=True)
    >>> result = save(config)
    >>> [dep.import_path for dep in result.manifest.deps]
"""

__version__ = "0.1.0"

from .config import SaveConfig
from .copier import (
    VendorCopyError,
    copy_file,
    copy_src,
    remove_src,
    write_vcs_ignore,
)
from .exceptions import GopinError, SaveError
from .loader import (
    GoPackage,
    PackageLoadError,
    decode_package_stream,
    go_version,
    load_packages,
)
from .paths import (
    SEP,
    VENDOR_MARKER,
    contains_path_prefix,
    qualify,
    unqualify,
)
from .reconcile import (
    ReconcileError,
    RevisionMismatchError,
    UnsupportedVCSError,
    bad_sandbox_vcs,
    carry_vendored,
    carry_version,
    carry_versions,
    check_revisions,
    reconcile,
    sub_deps,
)
from .resolver import DependencyResolver, DependencyResolverError
from .rewriter import (
    ImportRewriteError,
    ImportRewriter,
    ImportSpan,
    RewriteResult,
    find_imports,
    rewrite_file,
    rewrite_source,
    rewrite_tree,
    walk_go_files,
)
from .save import SaveResult, save
from .vcs import BZR, GIT, HG, VCS, VCS_LIST, VCSError, vcs_from_dir

__all__ = [
    # Config
    "SaveConfig",
    # Errors
    "GopinError",
    "SaveError",
    # Paths
    "SEP",
    "VENDOR_MARKER",
    "contains_path_prefix",
    "qualify",
    "unqualify",
    # VCS
    "VCS",
    "VCS_LIST",
    "GIT",
    "HG",
    "BZR",
    "VCSError",
    "vcs_from_dir",
    # Loader
    "GoPackage",
    "PackageLoadError",
    "decode_package_stream",
    "go_version",
    "load_packages",
    # Resolver
    "DependencyResolver",
    "DependencyResolverError",
    # Reconciler
    "ReconcileError",
    "RevisionMismatchError",
    "UnsupportedVCSError",
    "bad_sandbox_vcs",
    "carry_vendored",
    "carry_version",
    "carry_versions",
    "check_revisions",
    "reconcile",
    "sub_deps",
    # Rewriter
    "ImportRewriteError",
    "ImportRewriter",
    "ImportSpan",
    "RewriteResult",
    "find_imports",
    "rewrite_file",
    "rewrite_source",
    "rewrite_tree",
    "walk_go_files",
    # Copier
    "VendorCopyError",
    "copy_file",
    "copy_src",
    "remove_src",
    "write_vcs_ignore",
    # Save
    "SaveResult",
    "save",
]
