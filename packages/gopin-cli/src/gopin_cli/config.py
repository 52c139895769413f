# SPDX-License-Identifier: MIT
"""CLI configuration loading from gopin.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gopin_manifest import MANIFEST_DIR, ManifestError, find_manifest
from gopin_vendor import SaveConfig

CONFIG_FILENAME = "gopin.toml"

# Environment variable naming the go executable
GO_ENV_VAR = "GOPIN_GO"


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass
class CLIConfig:
    """CLI configuration loaded from gopin.toml.

    Attributes:
        project_dir: Directory of the project
        rewrite: Rewrite imports of vendored dependencies by default
        go: Go executable
        packages: Default package patterns for save
    """

    project_dir: Path
    rewrite: bool = False
    go: str = "go"
    packages: list[str] = field(default_factory=list)

    @classmethod
    def from_file(cls, project_dir: str | Path) -> "CLIConfig":
        """Load configuration from gopin.toml, or defaults if there is none.

        Raises:
            ConfigError: If the file is not valid TOML or has bad values
        """
        project_path = Path(project_dir)
        config_path = project_path / CONFIG_FILENAME

        if not config_path.exists():
            return cls(project_dir=project_path)

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e

        return cls.from_toml_dict(data, project_path)

    @classmethod
    def from_toml_dict(cls, data: dict[str, Any], project_dir: Path) -> "CLIConfig":
        """Create CLIConfig from a parsed gopin.toml dictionary."""
        rewrite = data.get("rewrite", False)
        if not isinstance(rewrite, bool):
            raise ConfigError("'rewrite' must be a boolean")

        go = data.get("go", "go")
        if not isinstance(go, str) or not go:
            raise ConfigError("'go' must be a non-empty string")

        packages = data.get("packages", [])
        if not isinstance(packages, list) or not all(isinstance(p, str) for p in packages):
            raise ConfigError("'packages' must be a list of strings")

        return cls(project_dir=project_dir, rewrite=rewrite, go=go, packages=packages)

    def save_config(
        self,
        packages: tuple[str, ...] = (),
        rewrite: Optional[bool] = None,
        copy: Optional[bool] = None,
    ) -> SaveConfig:
        """Build the SaveConfig for one save; arguments override file values."""
        return SaveConfig(
            project_dir=self.project_dir,
            packages=list(packages) if packages else list(self.packages),
            rewrite_transitive=self.rewrite if rewrite is None else rewrite,
            copy=copy,
            go=self.go,
        )

    @property
    def workspace_dir(self) -> Path:
        return self.project_dir / MANIFEST_DIR / "_workspace"


def find_project_root(start_dir: Optional[str | Path] = None) -> Path:
    """Find the nearest directory holding a saved Deps/Deps.json.

    Raises:
        ConfigError: If no project root is found
    """
    try:
        manifest = find_manifest(start_dir)
    except ManifestError as e:
        raise ConfigError(f"Could not find project root: {e}") from e
    return manifest.parent.parent


def load_config(project_dir: Optional[str | Path] = None) -> CLIConfig:
    """Load CLI configuration for ``project_dir`` (defaults to the cwd).

    The ``GOPIN_GO`` environment variable overrides the go executable.

    Raises:
        ConfigError: If configuration cannot be loaded
    """
    project_path = Path(project_dir) if project_dir is not None else Path.cwd()
    config = CLIConfig.from_file(project_path.resolve())

    go = os.environ.get(GO_ENV_VAR)
    if go:
        config.go = go
    return config
