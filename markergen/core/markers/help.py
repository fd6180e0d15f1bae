"""
Marker help — structured documentation attached to marker definitions.
"""

from __future__ import annotations

import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, Field


class FieldHelp(BaseModel):
    """Documentation for one field of a struct marker."""

    name: str
    type: str = ""
    optional: bool = True
    summary: str = ""
    details: str = ""


class MarkerHelp(BaseModel):
    """Documentation for a whole marker.

    Markers with an empty category are considered internal and only
    appear in the ``full`` help level.
    """

    category: str = ""
    summary: str = ""
    details: str = ""
    deprecated_in_favor_of: str | None = None
    fields: list[FieldHelp] = Field(default_factory=list)


def type_name(annotation: Any) -> str:
    """Human-readable name of a field annotation."""
    origin = get_origin(annotation)
    if origin is None:
        if annotation is type(None):
            return "None"
        return getattr(annotation, "__name__", str(annotation))

    args = get_args(annotation)
    if origin is Union or origin is types.UnionType:
        return " | ".join(type_name(a) for a in args)
    if args and hasattr(annotation, "__metadata__"):
        return type_name(args[0])
    inner = ", ".join(type_name(a) for a in args)
    return f"{getattr(origin, '__name__', str(origin))}[{inner}]"


def fields_from_model(model: type[BaseModel]) -> list[FieldHelp]:
    """Derive field help from a pydantic model's fields and descriptions."""
    result = []
    for name, info in model.model_fields.items():
        summary, _, details = (info.description or "").partition("\n\n")
        result.append(
            FieldHelp(
                name=info.alias or name,
                type=type_name(info.annotation),
                optional=not info.is_required(),
                summary=summary.strip(),
                details=details.strip(),
            )
        )
    return result


def model_help(
    model: type[BaseModel],
    category: str,
    summary: str,
    details: str = "",
) -> MarkerHelp:
    """Help for a struct marker, with fields taken from the model."""
    return MarkerHelp(
        category=category,
        summary=summary,
        details=details,
        fields=fields_from_model(model),
    )
