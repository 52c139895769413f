# SPDX-License-Identifier: MIT
"""Tests for the gopin save command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from gopin_cli.main import cli


class TestSaveCommand:
    """Tests for gopin save command."""

    def test_save_writes_manifest(self, cli_runner: CliRunner, temp_project: Path, git_rev) -> None:
        """Test saving a project with one dependency."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save"])

        assert result.exit_code == 0, result.output
        assert "Saved 1 dependency" in result.output

        manifest = json.loads((temp_project / "Deps" / "Deps.json").read_text())
        assert manifest["ImportPath"] == "C"
        assert manifest["GoVersion"] == "go1.4.2"
        assert manifest["Deps"] == [
            {
                "ImportPath": "D",
                "Comment": "v1.0",
                "Rev": git_rev(temp_project.parent / "D"),
            }
        ]
        assert (temp_project / "Deps" / "_workspace" / "src" / "D" / "d.go").exists()
        # Imports are only rewritten with -r
        assert 'import "D"' in (temp_project / "main.go").read_text()

    def test_save_with_rewrite(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that -r rewrites imports into the vendor workspace."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save", "-r"])

        assert result.exit_code == 0, result.output
        assert 'import "C/Deps/_workspace/src/D"' in (temp_project / "main.go").read_text()

    def test_save_records_packages(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that explicit package patterns are recorded."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save", "./..."])

        assert result.exit_code == 0, result.output
        manifest = json.loads((temp_project / "Deps" / "Deps.json").read_text())
        assert manifest["Packages"] == ["./..."]

    def test_save_rewrite_from_config(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that gopin.toml can enable rewriting."""
        (temp_project / "gopin.toml").write_text("rewrite = true\n")

        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save"])

        assert result.exit_code == 0, result.output
        assert "C/Deps/_workspace/src/D" in (temp_project / "main.go").read_text()

    def test_save_verbose(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that verbose output lists added dependencies."""
        result = cli_runner.invoke(cli, ["-v", "-C", str(temp_project), "save", "-r"])

        assert result.exit_code == 0, result.output
        assert "added D" in result.output
        assert "rewrote" in result.output

    def test_save_deprecated_copy_flag(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that --no-copy is accepted and sources are still copied."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save", "--no-copy"])

        assert result.exit_code == 0, result.output
        assert (temp_project / "Deps" / "_workspace" / "src" / "D").is_dir()

    def test_save_dirty_dependency(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that a modified dependency aborts the save."""
        (temp_project.parent / "D" / "d.go").write_text("package D\n")

        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save"])

        assert result.exit_code == 1
        assert "dirty working tree" in result.output
        assert not (temp_project / "Deps").exists()

    def test_save_invalid_config(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that a bad gopin.toml is reported."""
        (temp_project / "gopin.toml").write_text("rewrite = [\n")

        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save"])

        assert result.exit_code == 1
        assert "Invalid TOML" in result.output

    def test_save_unknown_option(self, cli_runner: CliRunner, temp_project: Path) -> None:
        """Test that usage errors exit with status 2."""
        result = cli_runner.invoke(cli, ["-C", str(temp_project), "save", "--bogus"])

        assert result.exit_code == 2
