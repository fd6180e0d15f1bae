"""
OpenAPI schema building — shared by the crds and schemas generators.

Turns scanned classes into JSON-schema objects. Scalar annotations map to
JSON types, containers to arrays/maps, known classes to nested objects
(through a caller-supplied ``ref`` so CRDs can inline while JSON schemas
use ``$ref``). Validation markers become schema constraints.
"""

from __future__ import annotations

import ast
from collections.abc import Callable
from typing import Any

from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.source import FieldInfo, TypeInfo

Schema = dict[str, Any]
RefFunc = Callable[[str], Schema]

_SCALARS: dict[str, Schema] = {
    "str": {"type": "string"},
    "int": {"type": "integer"},
    "float": {"type": "number"},
    "bool": {"type": "boolean"},
    "bytes": {"type": "string", "format": "byte"},
    "datetime": {"type": "string", "format": "date-time"},
    "Any": {},
}
_ARRAYS = {"list", "List", "Sequence", "set", "Set", "tuple", "Tuple"}
_MAPS = {"dict", "Dict", "Mapping"}


def _last(node: ast.expr) -> str:
    return ast.unparse(node).split(".")[-1]


def strip_optional(node: ast.expr) -> ast.expr:
    """``X | None`` / ``Optional[X]`` → ``X``."""
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        if isinstance(node.right, ast.Constant) and node.right.value is None:
            return strip_optional(node.left)
        if isinstance(node.left, ast.Constant) and node.left.value is None:
            return strip_optional(node.right)
    if isinstance(node, ast.Subscript) and _last(node.value) == "Optional":
        return strip_optional(node.slice)
    return node


def schema_for(node: ast.expr, known: dict[str, TypeInfo], ref: RefFunc) -> Schema:
    """JSON schema of an annotation."""
    node = strip_optional(node)

    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return schema_for(ast.parse(node.value, mode="eval").body, known, ref)

    if isinstance(node, (ast.Name, ast.Attribute)):
        name = _last(node)
        if name in _SCALARS:
            return dict(_SCALARS[name])
        if name in known:
            return ref(name)
        return {}

    if isinstance(node, ast.Subscript):
        base = _last(node.value)
        args = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        if base in _ARRAYS:
            return {"type": "array", "items": schema_for(args[0], known, ref)}
        if base in _MAPS and len(args) == 2:
            return {"type": "object", "additionalProperties": schema_for(args[1], known, ref)}
        if base == "Literal":
            return {"enum": [a.value for a in args if isinstance(a, ast.Constant)]}

    return {}


def describe(text: str, max_len: int | None) -> str | None:
    """Description text honoring ``maxDescLen`` (0 drops descriptions)."""
    if not text or max_len == 0:
        return None
    if max_len is not None and len(text) > max_len:
        return text[:max_len] + "..."
    return text


def field_schema(
    info: FieldInfo,
    known: dict[str, TypeInfo],
    ref: RefFunc,
    max_desc_len: int | None = None,
) -> Schema:
    schema = schema_for(info.annotation, known, ref)
    desc = describe(info.doc, max_desc_len)
    if desc:
        schema["description"] = desc
    default = info.markers.get(vocab.DEFAULT.name)
    if default is not None:
        schema["default"] = literal_value(default.value)
    if vocab.PATTERN.name in info.markers:
        schema["pattern"] = info.markers[vocab.PATTERN.name]
    if vocab.MINIMUM.name in info.markers:
        schema["minimum"] = info.markers[vocab.MINIMUM.name]
    if vocab.MAXIMUM.name in info.markers:
        schema["maximum"] = info.markers[vocab.MAXIMUM.name]
    if vocab.ENUM.name in info.markers:
        schema["enum"] = info.markers[vocab.ENUM.name]
    return schema


def object_schema(
    info: TypeInfo,
    known: dict[str, TypeInfo],
    ref: RefFunc,
    max_desc_len: int | None = None,
) -> Schema:
    """Schema of a class: its visible fields as properties."""
    schema: Schema = {"type": "object"}
    desc = describe(info.doc, max_desc_len)
    if desc:
        schema["description"] = desc

    fields = info.visible_fields()
    schema["properties"] = {f.name: field_schema(f, known, ref, max_desc_len) for f in fields}
    required = [f.name for f in fields if not f.optional and f.default is None]
    if required:
        schema["required"] = required
    if info.markers.get(vocab.UNION.name):
        schema["oneOf"] = [{"required": [f.name]} for f in fields]
    return schema


def literal_value(text: str) -> Any:
    """Parse a default written as source; fall back to the raw string."""
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return text
