# SPDX-License-Identifier: MIT
"""Import-path qualification for the vendor workspace.

A dependency ``D`` of project ``C`` is vendored at ``C/Deps/_workspace/src/D``.
``qualify`` maps a bare dependency path to that location and ``unqualify``
maps any vendored path, however deeply nested, back to the bare path.

Example:
    >>> qualify("D/P", "C", ["D"])
    'C/Deps/_workspace/src/D/P'
    >>> unqualify("C/Deps/_workspace/src/D/Deps/_workspace/src/T")
    'T'
"""

from __future__ import annotations

from typing import Iterable

# Vendor workspace source root, relative to the project directory
VENDOR_MARKER = "Deps/_workspace/src"

SEP = "/" + VENDOR_MARKER + "/"


def contains_path_prefix(prefixes: Iterable[str], path: str) -> bool:
    """Report whether ``path`` equals, or lies beneath, one of ``prefixes``."""
    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def qualify(path: str, qual: str, deps: Iterable[str]) -> str:
    """Return the vendored import path for ``path`` within project ``qual``.

    Paths that are not one of ``deps`` (or beneath one) are returned
    unchanged; this covers the standard library and the project's own
    packages.
    """
    if contains_path_prefix(deps, path):
        return qual + SEP + path
    return path


def unqualify(path: str) -> str:
    """Strip every vendor qualification from ``path``."""
    i = path.rfind(SEP)
    if i != -1:
        path = path[i + len(SEP):]
    return path
