# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

import importlib
import shutil
import subprocess
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from gopin_vendor.loader import GoPackage


# Direct imports of each package in the sample GOPATH
SAMPLE_GRAPH = {"C": ["D"], "D": ["fmt"]}


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


def _package(gopath: Path, import_path: str) -> GoPackage:
    if import_path == "fmt":
        return GoPackage(import_path="fmt", standard=True)
    directory = gopath / "src" / Path(*import_path.split("/"))
    if not directory.is_dir():
        return GoPackage(import_path=import_path, error=f"cannot find package {import_path!r}")
    deps: list[str] = []
    stack = list(SAMPLE_GRAPH.get(import_path, []))
    while stack:
        dep = stack.pop()
        if dep not in deps:
            deps.append(dep)
            stack.extend(SAMPLE_GRAPH.get(dep, []))
    return GoPackage(
        import_path=import_path,
        dir=str(directory),
        root=str(gopath),
        deps=sorted(deps),
        go_files=sorted(p.name for p in directory.glob("*.go")),
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a GOPATH holding project C, which imports dependency D.

    Both are git repositories. Package loading and ``go version`` are
    replaced so that no Go toolchain is needed.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    gopath = tmp_path / "gopath"
    project_dir = gopath / "src" / "C"
    dep_dir = gopath / "src" / "D"
    project_dir.mkdir(parents=True)
    dep_dir.mkdir(parents=True)

    (project_dir / "main.go").write_text('package main\n\nimport "D"\n\nfunc main() { D.Hello() }\n')
    (dep_dir / "d.go").write_text('package D\n\nimport "fmt"\n\nfunc Hello() { fmt.Println("hi") }\n')

    for repo in (project_dir, dep_dir):
        _git(repo, "init", "-q")
        _git(repo, "add", ".")
        _git(repo, "commit", "-q", "-m", "initial")
    _git(dep_dir, "tag", "v1.0")

    def load_packages(*patterns, go="go", cwd=None, env=None):
        packages = []
        for pattern in patterns:
            packages.append(_package(gopath, "C" if pattern in (".", "./...") else pattern))
        return packages

    save_module = importlib.import_module("gopin_vendor.save")
    monkeypatch.setattr(save_module, "load_packages", load_packages)
    monkeypatch.setattr(save_module, "go_version", lambda go="go", env=None: "go1.4.2")

    yield project_dir


@pytest.fixture
def saved_project(temp_project: Path, cli_runner: CliRunner) -> Path:
    """A project whose dependencies have already been saved."""
    from gopin_cli.main import cli

    result = cli_runner.invoke(cli, ["-C", str(temp_project), "save"])
    assert result.exit_code == 0, result.output
    return temp_project


@pytest.fixture
def git_rev():
    """Return the HEAD revision of a repository."""

    def rev(directory: Path) -> str:
        return _git(directory, "rev-parse", "HEAD").strip()

    return rev
