# SPDX-License-Identifier: MIT
"""Command line interface for gopin."""

__version__ = "0.1.0"
