# SPDX-License-Identifier: MIT
"""Save configuration for the vendoring engine.

The engine never reads ambient state: every mode switch a save depends on
(transitive rewriting, copying, which ``go`` to run) is carried explicitly
by a SaveConfig and passed to the resolver and rewrite engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gopin_manifest import MANIFEST_DIR, manifest_path_for

from .paths import VENDOR_MARKER


@dataclass
class SaveConfig:
    """Configuration for a single save.

    Attributes:
        project_dir: Directory of the project being saved
        packages: Package patterns to save (empty means the project itself)
        rewrite_transitive: Qualify imports of vendored dependencies (``-r``)
        copy: Deprecated copy flag as given by the user (None if not given);
            sources are always copied
        go: Go executable used to load packages
        env: Environment for ``go`` invocations (None inherits the process env)
    """

    project_dir: Path
    packages: list[str] = field(default_factory=list)
    rewrite_transitive: bool = False
    copy: Optional[bool] = None
    go: str = "go"
    env: Optional[dict[str, str]] = None

    def __post_init__(self) -> None:
        self.project_dir = Path(os.path.abspath(self.project_dir))

    @property
    def patterns(self) -> list[str]:
        """Package patterns to load, defaulting to the project itself."""
        return list(self.packages) if self.packages else ["."]

    @property
    def manifest_path(self) -> Path:
        """Path to Deps/Deps.json."""
        return manifest_path_for(self.project_dir)

    @property
    def workspace_dir(self) -> Path:
        """The vendor workspace, usable as a GOPATH entry."""
        return self.project_dir / MANIFEST_DIR / "_workspace"

    @property
    def vendor_src_dir(self) -> Path:
        """The ``src`` directory of the vendor workspace."""
        return self.project_dir / Path(VENDOR_MARKER)
