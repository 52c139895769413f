# SPDX-License-Identifier: MIT
"""Manifest validation for Deps/Deps.json.

Manifests are written by this tool but also edited by hand and carried over
from older releases, so a previously saved manifest is checked against the
schema before any of its pinned revisions are trusted.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from .schema import MANIFEST_DEFAULTS, MANIFEST_SCHEMA

_VALIDATOR = Draft202012Validator(MANIFEST_SCHEMA)


class ManifestError(Exception):
    """Base exception for manifest-related errors."""

    pass


class ManifestValidationError(ManifestError):
    """Raised when a manifest does not match the schema.

    Attributes:
        errors: Every schema violation, ordered by field path
    """

    def __init__(self, errors: list[ValidationErrorDetail]):
        self.errors = errors
        message = f"Manifest validation failed with {len(errors)} error(s)"
        if errors:
            message += f": {errors[0].field}: {errors[0].message}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """One schema violation.

    Attributes:
        field: Path of the offending value, e.g. "Deps[0].Rev"
        message: What is wrong with it
        value: The offending value, or None for the document root
    """

    field: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Outcome of validate_manifest.

    ``manifest`` holds the document with defaults filled in, and is only set
    when ``valid`` is true.
    """

    valid: bool
    errors: list[ValidationErrorDetail] = field(default_factory=list)
    manifest: dict | None = None


def _field_path(error: ValidationError) -> str:
    path = "".join(
        f"[{part}]" if isinstance(part, int) else f".{part}" for part in error.absolute_path
    )
    return path.lstrip(".") or "<root>"


def _dependency_of(manifest: dict, error: ValidationError) -> str:
    """Import path of the Deps entry an error lies in, if it has a usable one."""
    path = list(error.absolute_path)
    if len(path) < 2 or path[0] != "Deps" or not isinstance(path[1], int):
        return ""
    entry = manifest["Deps"][path[1]]
    if isinstance(entry, dict) and isinstance(entry.get("ImportPath"), str):
        return entry["ImportPath"]
    return ""


def _describe(error: ValidationError) -> str:
    if error.validator == "required":
        missing = [key for key in error.validator_value if key not in error.instance]
        noun = "field" if len(missing) == 1 else "fields"
        return f"Missing required {noun}: {', '.join(missing)}"
    if error.validator == "type":
        expected = error.validator_value
        if isinstance(expected, list):
            expected = " or ".join(expected)
        return f"Expected {expected}, got {type(error.instance).__name__}"
    if error.validator == "minLength":
        return "Must not be empty"
    return error.message


def validate_manifest(manifest: Any) -> ValidationResult:
    """Validate a decoded Deps.json document against the schema.

    Missing optional fields are filled with their defaults, and a ``null``
    ``Deps`` or ``Packages`` value is normalized to an empty list. Messages
    for errors inside a dependency name that dependency.

    Example:
        >>> result = validate_manifest({"ImportPath": "example.com/app"})
        >>> result.valid
        True
        >>> result.manifest["Deps"]
        []
    """
    errors: list[ValidationErrorDetail] = []
    for error in sorted(_VALIDATOR.iter_errors(manifest), key=lambda e: list(map(str, e.path))):
        message = _describe(error)
        dependency = _dependency_of(manifest, error)
        if dependency:
            message += f" (dependency {dependency})"
        errors.append(
            ValidationErrorDetail(
                field=_field_path(error),
                message=message,
                value=error.instance if error.absolute_path else None,
            )
        )

    if errors:
        return ValidationResult(valid=False, errors=errors)

    validated = dict(manifest)
    for key, default in MANIFEST_DEFAULTS.items():
        if validated.get(key) is None:
            validated[key] = copy.deepcopy(default)
    return ValidationResult(valid=True, manifest=validated)


def validate_manifest_strict(manifest: Any) -> dict:
    """Validate a manifest and return it with defaults applied.

    Raises:
        ManifestValidationError: If the manifest is invalid
    """
    result = validate_manifest(manifest)
    if not result.valid:
        raise ManifestValidationError(result.errors)
    return result.manifest  # type: ignore[return-value]
