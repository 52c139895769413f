# SPDX-License-Identifier: MIT
"""Exception hierarchy shared by the vendoring engine."""

from __future__ import annotations


class GopinError(Exception):
    """Base class for all vendoring errors."""

    pass


class SaveError(GopinError):
    """Raised when a save cannot be completed."""

    pass
