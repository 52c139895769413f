# SPDX-License-Identifier: MIT
"""JSON Schema definition for the dependency manifest (Deps/Deps.json).

The manifest records the import path of the project, the Go toolchain that
produced it, the package patterns the save was invoked with, and the pinned
revision of every vendored dependency. Key names and their order are part of
the on-disk compatibility surface and must not change.
"""

from __future__ import annotations

# Directory holding the manifest and the vendor workspace
MANIFEST_DIR = "Deps"

# Manifest file name inside MANIFEST_DIR
MANIFEST_FILENAME = "Deps.json"

_DEPENDENCY_SCHEMA: dict = {
    "type": "object",
    "description": "A single pinned dependency",
    "required": ["ImportPath", "Rev"],
    "properties": {
        "ImportPath": {
            "type": "string",
            "description": "Import path of the dependency package",
            "minLength": 1,
        },
        "Comment": {
            "type": "string",
            "description": "Tag or description of the pinned commit",
        },
        "Rev": {
            "type": "string",
            "description": "VCS-specific commit identifier",
        },
    },
    "additionalProperties": True,
}

# JSON Schema for Deps/Deps.json
MANIFEST_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Dependency Manifest",
    "description": "Pinned dependencies of a Go project (Deps/Deps.json)",
    "type": "object",
    "required": ["ImportPath"],
    "properties": {
        "ImportPath": {
            "type": "string",
            "description": "Import path of the project itself",
            "minLength": 1,
        },
        "GoVersion": {
            "type": "string",
            "description": "Abridged output of 'go version'",
        },
        "Packages": {
            "type": ["array", "null"],
            "description": "Package patterns the save was invoked with",
            "items": {"type": "string", "minLength": 1},
        },
        "Deps": {
            "type": ["array", "null"],
            "description": "Pinned dependencies, sorted by import path",
            "items": _DEPENDENCY_SCHEMA,
        },
    },
    "additionalProperties": True,
}

# Default values for optional fields
MANIFEST_DEFAULTS: dict = {
    "GoVersion": "",
    "Packages": [],
    "Deps": [],
}
