# SPDX-License-Identifier: MIT
"""Manifest model, schema, and validation for vendored Go dependencies.

This package provides utilities for working with Deps/Deps.json:
- JSON Schema definition for the manifest
- Validation with structured error reporting
- Dataclass model with canonical, atomic serialization

Example:
    >>> from gopin_manifest import Dependency, Manifest, dumps_manifest
    >>>
    >>> manifest = Manifest(import_path="example.com/app", go_version="go1.4.2")
    >>> manifest.deps.append(Dependency("github.com/x/y", comment="v1.0", rev="abc123"))
    >>> print(dumps_manifest(manifest))
"""

__version__ = "0.1.0"

from .schema import (
    MANIFEST_DEFAULTS,
    MANIFEST_DIR,
    MANIFEST_FILENAME,
    MANIFEST_SCHEMA,
)
from .validator import (
    ManifestError,
    ManifestValidationError,
    validate_manifest,
    validate_manifest_strict,
    ValidationErrorDetail,
    ValidationResult,
)
from .manifest import (
    Dependency,
    Manifest,
    dumps_manifest,
    find_manifest,
    manifest_path_for,
    read_manifest,
    write_manifest,
)

__all__ = [
    # Schema
    "MANIFEST_SCHEMA",
    "MANIFEST_DEFAULTS",
    "MANIFEST_DIR",
    "MANIFEST_FILENAME",
    # Validation
    "validate_manifest",
    "validate_manifest_strict",
    "ValidationResult",
    "ValidationErrorDetail",
    "ManifestError",
    "ManifestValidationError",
    # Model
    "Dependency",
    "Manifest",
    "dumps_manifest",
    "find_manifest",
    "manifest_path_for",
    "read_manifest",
    "write_manifest",
]
