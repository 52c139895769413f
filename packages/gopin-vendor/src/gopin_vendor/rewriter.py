# SPDX-License-Identifier: MIT
"""Span-preserving import rewriting for vendored Go dependencies.

This module rewrites the import paths of Go source files so that imports of
vendored dependencies resolve to the project's vendor workspace. Files are
parsed with tree-sitter only to locate the byte span of every import path
literal; the new literal is spliced into the original bytes, so comments,
blank lines and alignment are left exactly as they were.

Example:
    Original (project "C", dependency "D"):
        import (
            "fmt"
            "D/sub"
        )

    Rewritten:
        import (
            "fmt"
            "C/Deps/_workspace/src/D/sub"
        )
"""

from __future__ import annotations

import codecs
import json
import logging
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .exceptions import GopinError
from .paths import qualify, unqualify

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

# Escape sequences of Go interpreted string literals; an empty group is a
# backslash that starts no valid escape
_GO_ESCAPE = re.compile(
    r"\\(x[0-9a-fA-F]{2}|[0-7]{3}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|[abfnrtv\\\"]|)"
)

# Top-level nodes that may precede or sit between import declarations
_HEADER_NODES = frozenset({"package_clause", "import_declaration", "comment"})


class ImportRewriteError(GopinError):
    """Raised when import rewriting fails."""

    pass


@dataclass(frozen=True)
class ImportSpan:
    """An import path literal and its byte range in the source.

    Attributes:
        path: The decoded import path
        start: Offset of the opening quote
        end: Offset just past the closing quote
    """

    path: str
    start: int
    end: int


@dataclass
class RewriteResult:
    """Planned or applied rewrite of one file.

    Attributes:
        path: File path
        original: Original file content
        rewritten: Content after rewriting
        imports_rewritten: Number of import literals that changed
    """

    path: Path
    original: bytes
    rewritten: bytes
    imports_rewritten: int = 0

    @property
    def modified(self) -> bool:
        return self.rewritten != self.original


def _decode_literal(node: Node, filename: str) -> str:
    text = node.text or b""
    inner = text[1:-1].decode("utf-8")
    if node.type == "raw_string_literal" or "\\" not in inner:
        return inner

    def unescape(match: re.Match) -> str:
        if not match.group(1):
            raise ImportRewriteError(f"{filename}: cannot decode import path {text!r}")
        return codecs.decode(match.group(0), "unicode_escape")

    return _GO_ESCAPE.sub(unescape, inner)


def _import_specs(decl: Node) -> list[Node]:
    specs: list[Node] = []
    for child in decl.named_children:
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(c for c in child.named_children if c.type == "import_spec")
    return specs


def find_imports(source: bytes, filename: str = "<string>") -> list[ImportSpan]:
    """Locate every import path literal in a Go source file.

    Only the package clause and the import declarations are inspected; the
    rest of the file may contain anything.

    Raises:
        ImportRewriteError: If the file has no package clause or its import
            declarations cannot be parsed
    """
    tree = Parser(GO_LANGUAGE).parse(source)
    root = tree.root_node

    spans: list[ImportSpan] = []
    seen_package = False
    for child in root.named_children:
        if child.type not in _HEADER_NODES:
            if child.type == "ERROR" or child.is_missing:
                raise ImportRewriteError(
                    f"{filename}:{child.start_point[0] + 1}: cannot parse import block"
                )
            break
        if child.has_error:
            raise ImportRewriteError(
                f"{filename}:{child.start_point[0] + 1}: cannot parse import block"
            )
        if child.type == "package_clause":
            seen_package = True
        elif child.type == "import_declaration":
            if not seen_package:
                raise ImportRewriteError(f"{filename}: import before package clause")
            for spec in _import_specs(child):
                literal = spec.child_by_field_name("path")
                if literal is None:
                    raise ImportRewriteError(
                        f"{filename}:{spec.start_point[0] + 1}: import without path"
                    )
                spans.append(
                    ImportSpan(
                        path=_decode_literal(literal, filename),
                        start=literal.start_byte,
                        end=literal.end_byte,
                    )
                )

    if not seen_package:
        raise ImportRewriteError(f"{filename}: no package clause found")
    return spans


def rewrite_source(
    source: bytes,
    qual: str,
    paths: Iterable[str],
    filename: str = "<string>",
) -> tuple[bytes, int]:
    """Rewrite the import paths of one Go source file.

    Every import path is first unqualified and then qualified against
    ``paths``, so imports that point into a dependency's own vendor
    workspace are redirected to the project's.

    Args:
        source: Go source code
        qual: Import path of the project owning the vendor workspace
        paths: Import paths of the vendored dependencies
        filename: Filename for error messages

    Returns:
        Tuple of (rewritten_source, imports_rewritten)

    Raises:
        ImportRewriteError: If the import block cannot be parsed
    """
    deps = list(paths)
    edits: list[tuple[ImportSpan, bytes]] = []
    for span in find_imports(source, filename):
        new_path = qualify(unqualify(span.path), qual, deps)
        if new_path != span.path:
            edits.append((span, json.dumps(new_path, ensure_ascii=False).encode("utf-8")))

    if not edits:
        return source, 0

    out = bytearray(source)
    for span, literal in sorted(edits, key=lambda e: e[0].start, reverse=True):
        out[span.start:span.end] = literal
    return bytes(out), len(edits)


def walk_go_files(root: str | Path) -> list[Path]:
    """List the ``.go`` files under ``root``.

    ``testdata`` and hidden directories are skipped, as are symlinks.
    """
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames if d != "testdata" and not d.startswith(".")
        )
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if name.endswith(".go") and not path.is_symlink():
                files.append(path)
    return files


class ImportRewriter:
    """Plans and applies import rewrites for a set of files.

    Planning reads and rewrites every file in memory without touching the
    disk, so a parse failure anywhere aborts before any file is written.
    """

    def __init__(self, qual: str, paths: Iterable[str]) -> None:
        """Initialize the rewriter.

        Args:
            qual: Import path of the project owning the vendor workspace
            paths: Import paths of the vendored dependencies (empty disables
                qualification; already-qualified paths are still unqualified)
        """
        self.qual = qual
        self.paths = sorted(set(paths))

    def plan_file(self, path: str | Path) -> RewriteResult:
        file_path = Path(path)
        try:
            source = file_path.read_bytes()
        except OSError as e:
            raise ImportRewriteError(f"Failed to read {file_path}: {e}") from e

        rewritten, count = rewrite_source(source, self.qual, self.paths, filename=str(file_path))
        return RewriteResult(
            path=file_path,
            original=source,
            rewritten=rewritten,
            imports_rewritten=count,
        )

    def plan_files(self, files: Iterable[str | Path]) -> list[RewriteResult]:
        results: list[RewriteResult] = []
        seen: set[Path] = set()
        for path in files:
            file_path = Path(path)
            if file_path in seen:
                continue
            seen.add(file_path)
            if file_path.is_symlink():
                logger.debug("not rewriting symlink %s", file_path)
                continue
            results.append(self.plan_file(file_path))
        return results

    def plan_tree(self, root: str | Path) -> list[RewriteResult]:
        return self.plan_files(walk_go_files(root))

    def apply(self, results: Iterable[RewriteResult]) -> list[RewriteResult]:
        """Write every modified file and return the ones written."""
        written: list[RewriteResult] = []
        for result in results:
            if not result.modified:
                continue
            _replace_file(result.path, result.rewritten)
            logger.debug("rewrote %d import(s) in %s", result.imports_rewritten, result.path)
            written.append(result)
        return written


def _replace_file(path: Path, content: bytes) -> None:
    temp_path = path.with_name(path.name + ".temp")
    try:
        temp_path.write_bytes(content)
        shutil.copymode(path, temp_path)
        # Required before the rename on Windows
        path.unlink()
        os.replace(temp_path, path)
    except OSError as e:
        raise ImportRewriteError(f"Failed to write {path}: {e}") from e


def rewrite_file(path: str | Path, qual: str, paths: Iterable[str]) -> RewriteResult:
    """Rewrite one file in place; the file is only written if it changed."""
    rewriter = ImportRewriter(qual, paths)
    result = rewriter.plan_file(path)
    rewriter.apply([result])
    return result


def rewrite_tree(root: str | Path, qual: str, paths: Iterable[str]) -> list[RewriteResult]:
    """Rewrite every Go file under ``root``.

    The whole tree is planned before any file is written.

    Raises:
        ImportRewriteError: If any file cannot be parsed (nothing is written)
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise ImportRewriteError(f"Source directory does not exist: {root_path}")
    rewriter = ImportRewriter(qual, paths)
    return rewriter.apply(rewriter.plan_tree(root_path))
