# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for vendoring tests."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

from gopin_vendor.loader import GoPackage


STDLIB = frozenset({"fmt", "os", "strings", "io", "errors", "sort"})


def go_source(name: str, *imports: str) -> str:
    """Render a Go file with a parenthesized import block."""
    lines = "".join(f'\t"{imp}"\n' for imp in imports)
    return f"package {name}\n\nimport (\n{lines})\n"


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Write ``files`` (slash-separated relative path -> content) under ``root``."""
    for rel, body in files.items():
        path = root.joinpath(*rel.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        if body.startswith("symlink:"):
            path.symlink_to(body[len("symlink:"):])
        else:
            path.write_text(body, encoding="utf-8")


def read_tree(root: Path, paths: list[str]) -> dict[str, str]:
    """Read the given files back from ``root``."""
    return {rel: root.joinpath(*rel.split("/")).read_text(encoding="utf-8") for rel in paths}


class FakeGopath:
    """A package loader over a GOPATH directory, standing in for ``go list``.

    Attributes:
        gopath: The GOPATH directory (packages live in ``gopath/src``)
        imports: Direct imports of each import path
        project: Import path reported for the pattern "."
    """

    def __init__(self, gopath: Path, imports: dict[str, list[str]], project: str):
        self.gopath = gopath
        self.imports = imports
        self.project = project
        self.calls: list[tuple[str, ...]] = []

    def closure(self, path: str) -> list[str]:
        seen: set[str] = set()
        stack = list(self.imports.get(path, []))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.imports.get(current, []))
        return sorted(seen)

    def package(self, path: str) -> GoPackage:
        if path in STDLIB:
            return GoPackage(import_path=path, dir=f"/goroot/src/{path}", standard=True)
        directory = self.gopath / "src" / Path(*path.split("/"))
        if not directory.is_dir():
            return GoPackage(import_path=path, error=f"cannot find package {path!r}")
        go_files = sorted(p.name for p in directory.iterdir() if p.suffix == ".go")
        return GoPackage(
            import_path=path,
            dir=str(directory),
            root=str(self.gopath),
            deps=self.closure(path),
            go_files=go_files,
        )

    def __call__(self, *patterns: str) -> list[GoPackage]:
        self.calls.append(patterns)
        packages: list[GoPackage] = []
        for pattern in patterns:
            if pattern == ".":
                packages.append(self.package(self.project))
            elif pattern.endswith("/..."):
                base = pattern[: -len("/...")]
                base = self.project if base == "." else base
                packages.extend(
                    self.package(p) for p in sorted(self.imports) if p == base or p.startswith(base + "/")
                )
            else:
                packages.append(self.package(pattern))
        return packages


@pytest.fixture
def gopath(tmp_path: Path) -> Path:
    """An empty GOPATH directory."""
    path = tmp_path / "gopath"
    (path / "src").mkdir(parents=True)
    return path


@pytest.fixture
def fake_gopath() -> Callable[..., FakeGopath]:
    """Factory for FakeGopath loaders."""
    return FakeGopath


@pytest.fixture
def git() -> Callable[..., str]:
    """Run git in a directory; skips the test when git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def run(directory: Path, *args: str) -> str:
        result = subprocess.run(
            [
                "git",
                "-c",
                "user.name=gopin",
                "-c",
                "user.email=gopin@example.com",
                "-c",
                "commit.gpgsign=false",
                "-c",
                "init.defaultBranch=master",
                *args,
            ],
            cwd=str(directory),
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    return run


@pytest.fixture
def git_repo(git: Callable[..., str]) -> Callable[..., str]:
    """Initialize and commit a repository; returns the commit id."""

    def make(directory: Path, tag: str = "") -> str:
        directory.mkdir(parents=True, exist_ok=True)
        git(directory, "init", "-q")
        git(directory, "add", ".")
        git(directory, "commit", "-q", "--allow-empty", "-m", "gopin")
        if tag:
            git(directory, "tag", tag)
        return git(directory, "rev-parse", "HEAD").strip()

    return make


@pytest.fixture
def go_src() -> Callable[..., str]:
    """Renderer for Go files with a parenthesized import block."""
    return go_source


@pytest.fixture
def make_tree() -> Callable[[Path, dict[str, str]], None]:
    """Writer for a tree of files (symlinks written as ``symlink:<target>``)."""
    return write_tree


@pytest.fixture
def read_files() -> Callable[[Path, list[str]], dict[str, str]]:
    """Reader returning the content of a list of files."""
    return read_tree
