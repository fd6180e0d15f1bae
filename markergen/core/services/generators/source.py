"""
Source scanning — collect classes, fields and their markers from Python
source roots.

Markers are ``# +name...`` comment lines directly above a class or an
annotated class attribute. Markers unknown to the reading generator are
ignored (they may belong to another tool); known markers that fail to
parse are generation errors.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from markergen.core.errors import GenerationError
from markergen.core.markers.definition import TargetType
from markergen.core.markers.registry import Registry

logger = logging.getLogger(__name__)

GENERATED_PREFIX = "zz_generated"


@dataclass
class FieldInfo:
    """An annotated attribute of a scanned class."""

    name: str
    annotation: ast.expr
    default: str | None = None
    doc: str = ""
    markers: dict[str, Any] = field(default_factory=dict)

    @property
    def type_text(self) -> str:
        return ast.unparse(self.annotation)

    @property
    def optional(self) -> bool:
        return self.markers.get("markergen:optional", False) or is_optional(self.annotation)


@dataclass
class TypeInfo:
    """A class found in a source package."""

    name: str
    file: Path
    package: Path
    doc: str = ""
    markers: dict[str, Any] = field(default_factory=dict)
    fields: list[FieldInfo] = field(default_factory=list)

    @property
    def module(self) -> str:
        return self.file.stem

    def visible_fields(self) -> list[FieldInfo]:
        return [f for f in self.fields if not f.markers.get("markergen:ignore")]


def is_optional(node: ast.expr) -> bool:
    """Whether an annotation admits ``None``."""
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return is_optional(node.left) or is_optional(node.right)
    if isinstance(node, ast.Constant) and node.value is None:
        return True
    if isinstance(node, ast.Subscript) and ast.unparse(node.value) in ("Optional", "typing.Optional"):
        return True
    return False


def snake(name: str) -> str:
    """CamelCase → snake_case."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name).lower()


def iter_source_files(roots: list[Path], exclude: list[str]) -> Iterator[Path]:
    """Python files below the roots, skipping excluded and generated files."""
    for root in roots:
        for path in sorted(root.rglob("*.py")):
            rel = path.relative_to(root).as_posix()
            if path.name.startswith(GENERATED_PREFIX):
                continue
            if any(fnmatch.fnmatch(rel, pattern) for pattern in exclude):
                logger.debug("Excluded %s", rel)
                continue
            yield path


def _comment_block(lines: list[str], lineno: int) -> list[str]:
    """Comment lines directly above 1-based ``lineno``, top to bottom."""
    block: list[str] = []
    idx = lineno - 2
    while idx >= 0 and lines[idx].strip().startswith("#"):
        block.append(lines[idx].strip()[1:].strip())
        idx -= 1
    return list(reversed(block))


def _markers_and_doc(
    registry: Registry,
    lines: list[str],
    lineno: int,
    target: TargetType,
    where: str,
) -> tuple[dict[str, Any], str]:
    markers: dict[str, Any] = {}
    doc: list[str] = []
    for text in _comment_block(lines, lineno):
        if not text.startswith("+"):
            doc.append(text)
            continue
        defn = registry.lookup(text, target)
        if defn is None:
            logger.debug("%s: ignoring unknown marker %s", where, text)
            continue
        try:
            markers[defn.name] = defn.parse(text)
        except ValueError as e:
            raise GenerationError(f"{where}: invalid marker {text!r}: {e}") from e
    return markers, " ".join(doc)


def _field_doc(body: list[ast.stmt], idx: int) -> str:
    """Attribute docstring: a string literal right after the assignment."""
    if idx + 1 < len(body):
        nxt = body[idx + 1]
        if isinstance(nxt, ast.Expr) and isinstance(nxt.value, ast.Constant) and isinstance(nxt.value.value, str):
            return nxt.value.value.strip()
    return ""


def scan_file(path: Path, registry: Registry) -> list[TypeInfo]:
    """Collect the module-level classes of one file."""
    try:
        source = path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(path))
    except (OSError, SyntaxError, UnicodeDecodeError) as e:
        raise GenerationError(f"cannot parse {path}: {e}") from e

    lines = source.splitlines()
    types: list[TypeInfo] = []

    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        start = min([node.lineno] + [d.lineno for d in node.decorator_list])
        markers, comment_doc = _markers_and_doc(
            registry, lines, start, TargetType.TYPE, f"{path}:{node.lineno}"
        )
        info = TypeInfo(
            name=node.name,
            file=path,
            package=path.parent,
            doc=ast.get_docstring(node) or comment_doc,
            markers=markers,
        )
        for idx, stmt in enumerate(node.body):
            if not (isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name)):
                continue
            if ast.unparse(stmt.annotation).startswith(("ClassVar", "typing.ClassVar")):
                continue
            fmarkers, fcomment = _markers_and_doc(
                registry, lines, stmt.lineno, TargetType.FIELD, f"{path}:{stmt.lineno}"
            )
            info.fields.append(
                FieldInfo(
                    name=stmt.target.id,
                    annotation=stmt.annotation,
                    default=ast.unparse(stmt.value) if stmt.value is not None else None,
                    doc=_field_doc(node.body, idx) or fcomment,
                    markers=fmarkers,
                )
            )
        types.append(info)

    return types


def load_types(roots: list[Path], exclude: list[str], registry: Registry) -> list[TypeInfo]:
    """Scan every source file below the roots."""
    types: list[TypeInfo] = []
    for path in iter_source_files(roots, exclude):
        types.extend(scan_file(path, registry))
    logger.debug("Scanned %d types from %s", len(types), ", ".join(str(r) for r in roots))
    return types


def by_package(types: list[TypeInfo]) -> dict[Path, list[TypeInfo]]:
    """Group types by their package directory, in scan order."""
    grouped: dict[Path, list[TypeInfo]] = {}
    for info in types:
        grouped.setdefault(info.package, []).append(info)
    return grouped


def code_header(generator: str) -> str:
    return f"# Code generated by markergen {generator}. DO NOT EDIT.\n"
