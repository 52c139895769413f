# SPDX-License-Identifier: MIT
"""In-memory manifest model and its on-disk JSON envelope.

A manifest is read once at the start of a save (the "old" manifest), a new one
is computed from the working tree, the two are reconciled, and only the merged
result is ever written back.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .schema import MANIFEST_DIR, MANIFEST_FILENAME
from .validator import ManifestError, validate_manifest_strict


@dataclass(eq=False)
class Dependency:
    """A pinned external package.

    Only ``import_path``, ``comment`` and ``rev`` are serialized. The other
    attributes are filled in by the resolver for the duration of one save.
    Two dependencies are equal when their import paths are equal.

    Attributes:
        import_path: Import path of the package, e.g. "github.com/x/y/sub"
        comment: Best-effort tag or description of the revision (advisory)
        rev: VCS-specific revision identifier
        root: Import path of the repository root that owns the package
        workspace: GOPATH entry the package was found in
        dir: Absolute source directory of the package
        vcs: VCS descriptor of the owning repository
    """

    import_path: str
    comment: str = ""
    rev: str = ""
    root: str = ""
    workspace: str = ""
    dir: str = ""
    vcs: Any = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dependency):
            return NotImplemented
        return self.import_path == other.import_path

    def __hash__(self) -> int:
        return hash(self.import_path)

    def to_dict(self) -> dict[str, str]:
        data = {"ImportPath": self.import_path}
        if self.comment:
            data["Comment"] = self.comment
        data["Rev"] = self.rev
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        return cls(
            import_path=data["ImportPath"],
            comment=data.get("Comment", ""),
            rev=data.get("Rev", ""),
        )


@dataclass
class Manifest:
    """The persisted record of a project's pinned dependencies.

    Attributes:
        import_path: Import path of the project itself
        go_version: Abridged output of 'go version' (informational)
        packages: Package patterns the save was invoked with, if any
        deps: Pinned dependencies
    """

    import_path: str = ""
    go_version: str = ""
    packages: list[str] = field(default_factory=list)
    deps: list[Dependency] = field(default_factory=list)

    def sorted_deps(self) -> list[Dependency]:
        """Return the dependencies ordered by import path."""
        return sorted(self.deps, key=lambda d: d.import_path)

    def get(self, import_path: str) -> Optional[Dependency]:
        """Return the dependency with the given import path, if present."""
        for dep in self.deps:
            if dep.import_path == import_path:
                return dep
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ImportPath": self.import_path,
            "GoVersion": self.go_version,
        }
        if self.packages:
            data["Packages"] = list(self.packages)
        # Always a list, never null
        data["Deps"] = [dep.to_dict() for dep in self.sorted_deps()]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Manifest:
        """Build a manifest from decoded JSON, validating it first.

        Raises:
            ManifestValidationError: If the document does not match the schema
        """
        valid = validate_manifest_strict(data)
        return cls(
            import_path=valid["ImportPath"],
            go_version=valid["GoVersion"],
            packages=list(valid["Packages"]),
            deps=[Dependency.from_dict(d) for d in valid["Deps"]],
        )


def dumps_manifest(manifest: Manifest) -> str:
    """Serialize a manifest to its canonical JSON text."""
    return json.dumps(manifest.to_dict(), indent="\t") + "\n"


def read_manifest(path: str | Path) -> Manifest:
    """Read and validate a manifest file.

    Raises:
        FileNotFoundError: If the file does not exist
        ManifestError: If the file is not valid JSON or fails validation
    """
    manifest_path = Path(path)
    text = manifest_path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"{manifest_path}: invalid JSON: {e}") from e
    return Manifest.from_dict(data)


def write_manifest(manifest: Manifest, path: str | Path) -> Path:
    """Replace the manifest file at ``path`` with ``manifest``.

    The old file is removed, the new content is written completely to a
    sibling temporary file, and that file is then renamed into place, so a
    reader never sees a partially written manifest.

    Returns:
        The path that was written
    """
    manifest_path = Path(path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = manifest_path.with_name(manifest_path.name + ".temp")

    with open(temp_path, "w", encoding="utf-8", newline="\n") as f:
        f.write(dumps_manifest(manifest))

    # Required before the rename on Windows
    if manifest_path.exists():
        manifest_path.unlink()
    os.replace(temp_path, manifest_path)
    return manifest_path


def manifest_path_for(project_dir: str | Path) -> Path:
    """Return the manifest location for a project directory."""
    return Path(project_dir) / MANIFEST_DIR / MANIFEST_FILENAME


def find_manifest(start_dir: Optional[str | Path] = None) -> Path:
    """Find the nearest Deps/Deps.json in ``start_dir`` or its parents.

    Raises:
        ManifestError: If no manifest is found
    """
    current = Path(start_dir) if start_dir else Path.cwd()
    current = current.resolve()

    while True:
        candidate = manifest_path_for(current)
        if candidate.is_file():
            return candidate
        if current == current.parent:
            break
        current = current.parent

    raise ManifestError(f"No {MANIFEST_DIR}/{MANIFEST_FILENAME} found in any parent directory")
