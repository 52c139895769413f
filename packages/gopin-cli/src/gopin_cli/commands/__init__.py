# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import go, path, save, version

__all__ = ["go", "path", "save", "version"]
