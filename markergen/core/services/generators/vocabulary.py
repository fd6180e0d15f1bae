"""
Source marker vocabulary — ``# +markergen:...`` comments in source files.

These definitions are shared: several generators read the same markers
and register the same definition objects.
"""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from markergen.core.markers.args import MarkerList
from markergen.core.markers.definition import MarkerDefinition, TargetType, make_definition
from markergen.core.markers.help import MarkerHelp, model_help


class _MarkerModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ResourceMarker(_MarkerModel):
    """Resource naming for a root type."""

    plural: str | None = Field(default=None, description="Plural resource name. Defaults to the lowercased kind + 's'.")
    group: str | None = Field(default=None, description="API group. Defaults to the crds generator's group option.")
    scope: Literal["Namespaced", "Cluster"] = Field(default="Namespaced", description="Resource scope.")
    short_name: MarkerList = Field(default_factory=list, description="Short names for the resource.")


class DefaultMarker(_MarkerModel):
    """Default value of an optional field."""

    marker_value_field: ClassVar[str | None] = "value"

    value: str = Field(description="Default value, written as it would be in source.")


ROOT = make_definition("markergen:root", TargetType.TYPE, bool)
UNION = make_definition("markergen:union", TargetType.TYPE, bool)
GENERATE = make_definition("markergen:generate", TargetType.TYPE, bool)
RESOURCE = make_definition("markergen:resource", TargetType.TYPE, ResourceMarker)

DEFAULT = make_definition("markergen:default", TargetType.FIELD, DefaultMarker)
OPTIONAL = make_definition("markergen:optional", TargetType.FIELD, bool)
IGNORE = make_definition("markergen:ignore", TargetType.FIELD, bool)

PATTERN = make_definition("markergen:validation:pattern", TargetType.FIELD, str)
MINIMUM = make_definition("markergen:validation:minimum", TargetType.FIELD, int)
MAXIMUM = make_definition("markergen:validation:maximum", TargetType.FIELD, int)
ENUM = make_definition("markergen:validation:enum", TargetType.FIELD, MarkerList)

_HELP: dict[str, MarkerHelp] = {
    ROOT.name: MarkerHelp(category="types", summary="marks a type as a top-level resource"),
    UNION.name: MarkerHelp(
        category="types",
        summary="marks a type as a union: exactly one of its fields may be set",
    ),
    GENERATE.name: MarkerHelp(category="types", summary="set to false to skip code generation for a type"),
    RESOURCE.name: model_help(ResourceMarker, category="types", summary="configures the resource names of a root type"),
    DEFAULT.name: model_help(DefaultMarker, category="fields", summary="sets the default value of an optional field"),
    OPTIONAL.name: MarkerHelp(category="fields", summary="marks a field as optional"),
    IGNORE.name: MarkerHelp(category="fields", summary="hides a field from generated code and schemas"),
    PATTERN.name: MarkerHelp(category="validation", summary="requires a string field to match a regular expression"),
    MINIMUM.name: MarkerHelp(category="validation", summary="sets the inclusive minimum of a numeric field"),
    MAXIMUM.name: MarkerHelp(category="validation", summary="sets the inclusive maximum of a numeric field"),
    ENUM.name: MarkerHelp(category="validation", summary="restricts a field to a fixed set of values"),
}


def with_help(*defns: MarkerDefinition) -> list[tuple[MarkerDefinition, MarkerHelp | None]]:
    """Pair shared definitions with their help."""
    return [(defn, _HELP.get(defn.name)) for defn in defns]


VALIDATION = (PATTERN, MINIMUM, MAXIMUM, ENUM)
