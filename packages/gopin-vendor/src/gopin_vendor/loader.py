# SPDX-License-Identifier: MIT
"""Package graph loading through the Go toolchain.

Package discovery is delegated to ``go list``: given a set of patterns it
reports every matching package with its source directory, workspace root,
standard-library membership and transitive imports.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .exceptions import GopinError

logger = logging.getLogger(__name__)


class PackageLoadError(GopinError):
    """Raised when the Go toolchain cannot list packages."""

    pass


@dataclass
class GoPackage:
    """A package as reported by ``go list -json``.

    Attributes:
        import_path: Import path of the package
        dir: Absolute source directory
        root: GOPATH entry (or GOROOT) containing the package
        standard: True for standard-library packages
        deps: Transitive import paths of the package
        error: Loader error for this package, empty if it loaded cleanly
    """

    import_path: str
    dir: str = ""
    root: str = ""
    standard: bool = False
    deps: list[str] = field(default_factory=list)
    go_files: list[str] = field(default_factory=list)
    cgo_files: list[str] = field(default_factory=list)
    ignored_go_files: list[str] = field(default_factory=list)
    test_go_files: list[str] = field(default_factory=list)
    xtest_go_files: list[str] = field(default_factory=list)
    test_imports: list[str] = field(default_factory=list)
    xtest_imports: list[str] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> GoPackage:
        error = data.get("Error") or {}
        return cls(
            import_path=data.get("ImportPath", ""),
            dir=data.get("Dir", ""),
            root=data.get("Root", ""),
            standard=bool(data.get("Standard", False)),
            deps=list(data.get("Deps") or []),
            go_files=list(data.get("GoFiles") or []),
            cgo_files=list(data.get("CgoFiles") or []),
            ignored_go_files=list(data.get("IgnoredGoFiles") or []),
            test_go_files=list(data.get("TestGoFiles") or []),
            xtest_go_files=list(data.get("XTestGoFiles") or []),
            test_imports=list(data.get("TestImports") or []),
            xtest_imports=list(data.get("XTestImports") or []),
            error=error.get("Err", "") if isinstance(error, dict) else str(error),
        )

    def all_go_files(self) -> list[str]:
        """All Go source file names of the package, tests included."""
        return (
            self.go_files
            + self.cgo_files
            + self.ignored_go_files
            + self.test_go_files
            + self.xtest_go_files
        )

    def file_paths(self) -> list[Path]:
        """Absolute paths of all Go source files of the package."""
        return [Path(self.dir) / name for name in self.all_go_files()]


# Signature of a package loader: patterns in, packages out
PackageLoader = Callable[..., list[GoPackage]]


def decode_package_stream(text: str) -> list[GoPackage]:
    """Decode the concatenated JSON objects printed by ``go list -json``."""
    decoder = json.JSONDecoder()
    packages: list[GoPackage] = []
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            break
        try:
            obj, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as e:
            raise PackageLoadError(f"Cannot decode go list output: {e}") from e
        packages.append(GoPackage.from_json(obj))
    return packages


def load_packages(
    *patterns: str,
    go: str = "go",
    cwd: Optional[str | Path] = None,
    env: Optional[dict[str, str]] = None,
) -> list[GoPackage]:
    """List the packages matching ``patterns``.

    Packages that fail to load are still returned, with ``error`` set, so the
    caller can report every failure at once.

    Raises:
        PackageLoadError: If ``go list`` cannot be run or fails outright
    """
    if not patterns:
        return []

    cmd = [go, "list", "-e", "-json", *patterns]
    logger.debug("running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        raise PackageLoadError(f"Go executable not found: {go}") from None
    if result.returncode != 0:
        raise PackageLoadError(f"go list failed:\n{result.stderr}")

    return decode_package_stream(result.stdout)


def go_version(
    go: str = "go",
    env: Optional[dict[str, str]] = None,
) -> str:
    """Return the abridged toolchain version, e.g. "go1.4.2".

    Raises:
        PackageLoadError: If the version cannot be determined
    """
    try:
        result = subprocess.run(
            [go, "version"],
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        raise PackageLoadError(f"Go executable not found: {go}") from None
    if result.returncode != 0:
        raise PackageLoadError(f"go version failed:\n{result.stderr}")

    # go version go1.4.2 linux/amd64
    parts = result.stdout.split()
    if len(parts) < 3:
        raise PackageLoadError(f"Unexpected go version output: {result.stdout!r}")
    return parts[2]
