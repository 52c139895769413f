# SPDX-License-Identifier: MIT
"""Tests for CLI configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from gopin_cli.config import CLIConfig, ConfigError, find_project_root, load_config


class TestCLIConfig:
    """Tests for CLIConfig."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = CLIConfig.from_file(tmp_path)

        assert config.project_dir == tmp_path
        assert config.rewrite is False
        assert config.go == "go"
        assert config.packages == []

    def test_reads_gopin_toml(self, tmp_path: Path) -> None:
        (tmp_path / "gopin.toml").write_text(
            'rewrite = true\ngo = "go1.4"\npackages = ["./..."]\n'
        )

        config = CLIConfig.from_file(tmp_path)

        assert config.rewrite is True
        assert config.go == "go1.4"
        assert config.packages == ["./..."]

    @pytest.mark.parametrize(
        "content,message",
        [
            ('rewrite = "yes"\n', "rewrite"),
            ("go = 1\n", "go"),
            ('packages = "./..."\n', "packages"),
            ("packages = [1]\n", "packages"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, content: str, message: str) -> None:
        (tmp_path / "gopin.toml").write_text(content)

        with pytest.raises(ConfigError, match=message):
            CLIConfig.from_file(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "gopin.toml").write_text("rewrite = \n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            CLIConfig.from_file(tmp_path)

    def test_save_config_flags_override_file(self, tmp_path: Path) -> None:
        config = CLIConfig(project_dir=tmp_path, rewrite=True, packages=["./..."])

        save_config = config.save_config(("./cmd/...",), rewrite=False, copy=False)

        assert save_config.packages == ["./cmd/..."]
        assert save_config.rewrite_transitive is False
        assert save_config.copy is False

    def test_save_config_uses_file_values(self, tmp_path: Path) -> None:
        config = CLIConfig(project_dir=tmp_path, rewrite=True, go="go1.4", packages=["./..."])

        save_config = config.save_config()

        assert save_config.packages == ["./..."]
        assert save_config.rewrite_transitive is True
        assert save_config.copy is None
        assert save_config.go == "go1.4"


class TestLoadConfig:
    """Tests for load_config and find_project_root."""

    def test_go_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "gopin.toml").write_text('go = "go1.3"\n')
        monkeypatch.setenv("GOPIN_GO", "/opt/go/bin/go")

        config = load_config(tmp_path)

        assert config.go == "/opt/go/bin/go"

    def test_find_project_root(self, tmp_path: Path) -> None:
        (tmp_path / "Deps").mkdir()
        (tmp_path / "Deps" / "Deps.json").write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_find_project_root_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Could not find project root"):
            find_project_root(tmp_path)
