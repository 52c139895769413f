# SPDX-License-Identifier: MIT
"""Fixtures for the integration tests.

The sample GOPATH under ``sample_gopath`` holds project C, which imports its
own package C/lib and dependency D; D imports D/util and T. Each of C, D and
T becomes a separate git repository.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from gopin_vendor.loader import GoPackage
from gopin_vendor.rewriter import find_imports

SAMPLE_GOPATH = Path(__file__).parent / "sample_gopath"

STANDARD_PACKAGES = frozenset({"fmt", "strings"})


class SourceLoader:
    """Lists packages by parsing their imports, standing in for ``go list``."""

    def __init__(self, gopath: Path, project: str):
        self.gopath = gopath
        self.project = project

    def _dir(self, import_path: str) -> Path:
        return self.gopath / "src" / Path(*import_path.split("/"))

    def imports(self, import_path: str) -> list[str]:
        found: list[str] = []
        for go_file in sorted(self._dir(import_path).glob("*.go")):
            for span in find_imports(go_file.read_bytes(), str(go_file)):
                if span.path not in found:
                    found.append(span.path)
        return found

    def package(self, import_path: str) -> GoPackage:
        if import_path in STANDARD_PACKAGES:
            return GoPackage(import_path=import_path, standard=True)
        directory = self._dir(import_path)
        if not directory.is_dir():
            return GoPackage(import_path=import_path, error=f"cannot find package {import_path!r}")

        deps: set[str] = set()
        stack = self.imports(import_path)
        while stack:
            dep = stack.pop()
            if dep in deps:
                continue
            deps.add(dep)
            if dep not in STANDARD_PACKAGES:
                stack.extend(self.imports(dep))

        return GoPackage(
            import_path=import_path,
            dir=str(directory),
            root=str(self.gopath),
            deps=sorted(deps),
            go_files=sorted(p.name for p in directory.glob("*.go")),
        )

    def walk(self, import_path: str) -> list[str]:
        """Import paths of every package at or below ``import_path``."""
        base = self._dir(import_path)
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(d for d in dirnames if d[0] not in "._" and d != "testdata")
            if any(name.endswith(".go") for name in filenames):
                rel = Path(dirpath).relative_to(self.gopath / "src")
                found.append(rel.as_posix())
        return found

    def __call__(self, *patterns: str) -> list[GoPackage]:
        packages: list[GoPackage] = []
        for pattern in patterns:
            if pattern == ".":
                packages.append(self.package(self.project))
            elif pattern == "./...":
                packages.extend(self.package(p) for p in self.walk(self.project))
            else:
                packages.append(self.package(pattern))
        return packages


def _git(directory: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=gopin",
            "-c",
            "user.email=gopin@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=str(directory),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def sample_gopath(tmp_path: Path) -> Path:
    """A copy of the sample GOPATH with C, D and T committed to git."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    gopath = tmp_path / "gopath"
    shutil.copytree(SAMPLE_GOPATH, gopath)
    for repo in ("C", "D", "T"):
        directory = gopath / "src" / repo
        _git(directory, "init", "-q")
        _git(directory, "add", ".")
        _git(directory, "commit", "-q", "-m", f"import {repo}")
    _git(gopath / "src" / "D", "tag", "v0.2.0")
    return gopath


@pytest.fixture
def source_loader(sample_gopath: Path) -> SourceLoader:
    """Package loader for project C in the sample GOPATH."""
    return SourceLoader(sample_gopath, "C")


@pytest.fixture
def head_rev():
    """Return the HEAD revision of a repository."""

    def rev(directory: Path) -> str:
        return _git(directory, "rev-parse", "HEAD").strip()

    return rev
