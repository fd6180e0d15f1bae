"""
Marker definitions — named, typed configuration markers.

A definition pairs a marker name with the shape of value it produces.
Struct-shaped markers target a pydantic model; each model field is a
marker field (camelCase on the command line). Scalar markers target a
plain type (``bool``, ``int``, ``str``, :data:`MarkerList`) and take
an anonymous value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, TypeAdapter

from markergen.core.errors import MarkerDefinitionError
from markergen.core.markers.args import parse_fields, split_marker, unquote


class TargetType(str, Enum):
    """What a marker describes."""

    PACKAGE = "package"
    TYPE = "type"
    FIELD = "field"


@dataclass(frozen=True, eq=False)
class MarkerDefinition:
    """A named marker and the value shape it parses into.

    Attributes:
        name:        Colon-delimited marker name (``output:crds:dir``).
        target:      What the marker describes.
        output_type: Pydantic model class or scalar type.
        value_field: For struct targets, the field set by ``name=value``.
    """

    name: str
    target: TargetType
    output_type: Any
    value_field: str | None = None

    @property
    def is_struct(self) -> bool:
        return isinstance(self.output_type, type) and issubclass(self.output_type, BaseModel)

    def parse(self, raw: str) -> Any:
        """Parse raw marker text into a typed value.

        Raises:
            ValueError: the text does not fit this marker (pydantic's
                ``ValidationError`` is a ``ValueError`` too).
        """
        name_part, value = split_marker(raw)

        if name_part == self.name:
            fields_text, anonymous = None, value
        elif name_part.startswith(self.name + ":"):
            suffix = name_part[len(self.name) + 1:]
            if not suffix:
                raise ValueError(f"empty field list after {self.name + ':'!r}")
            fields_text = suffix if value is None else f"{suffix}={value}"
            anonymous = None
        else:
            raise ValueError(f"{raw!r} is not a {self.name!r} marker")

        if self.is_struct:
            return self._parse_struct(fields_text, anonymous)
        return self._parse_scalar(fields_text, anonymous)

    def _parse_struct(self, fields_text: str | None, anonymous: str | None) -> BaseModel:
        data: dict[str, Any] = {}
        if anonymous is not None:
            if self.value_field is None:
                raise ValueError(
                    f"marker {self.name!r} does not take a value, "
                    f"use {self.name}:<field>=<value>"
                )
            data[self.value_field] = unquote(anonymous)
        if fields_text is not None:
            data.update(parse_fields(fields_text))
        return self.output_type.model_validate(data)

    def _parse_scalar(self, fields_text: str | None, anonymous: str | None) -> Any:
        if fields_text is not None:
            raise ValueError(f"marker {self.name!r} takes no fields")
        if anonymous is None:
            if self.output_type is bool:
                return True
            raise ValueError(f"marker {self.name!r} requires a value")
        return TypeAdapter(self.output_type).validate_python(unquote(anonymous))


def make_definition(
    name: str,
    target: TargetType,
    output_type: Any,
    value_field: str | None = None,
) -> MarkerDefinition:
    """Build a definition, checking its name and value field.

    For model targets the value field defaults to the model's
    ``marker_value_field`` class attribute.

    Raises:
        MarkerDefinitionError: malformed name or unknown value field.
    """
    if not name or name != name.strip() or any(c in name for c in "=, \t"):
        raise MarkerDefinitionError(f"invalid marker name {name!r}")
    if name.startswith(":") or name.endswith(":") or "::" in name:
        raise MarkerDefinitionError(f"invalid marker name {name!r}")

    defn = MarkerDefinition(name=name, target=target, output_type=output_type)
    if defn.is_struct:
        if value_field is None:
            value_field = getattr(output_type, "marker_value_field", None)
        if value_field is not None and value_field not in output_type.model_fields:
            raise MarkerDefinitionError(
                f"marker {name!r}: {output_type.__name__} has no field {value_field!r}"
            )
    elif value_field is not None:
        raise MarkerDefinitionError(f"marker {name!r}: scalar markers have no value field")

    return MarkerDefinition(name=name, target=target, output_type=output_type, value_field=value_field)
