"""
Help categories — group a registry's marker documentation for display.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, Field

from markergen.core.config.options import OUTPUT_PREFIX
from markergen.core.markers.definition import MarkerDefinition
from markergen.core.markers.help import FieldHelp, MarkerHelp, fields_from_model, type_name
from markergen.core.markers.registry import Registry


class MarkerDoc(BaseModel):
    """Everything the presenter knows about one marker."""

    name: str
    target: str
    category: str = ""
    summary: str = ""
    details: str = ""
    deprecated_in_favor_of: str | None = None
    value_type: str | None = None   # scalar markers: type of the anonymous value
    value_field: str | None = None  # struct markers: field set by name=value
    fields: list[FieldHelp] = Field(default_factory=list)


class CategoryDoc(BaseModel):
    category: str
    markers: list[MarkerDoc] = Field(default_factory=list)


SortGroup = Callable[[list[CategoryDoc]], list[CategoryDoc]]


def marker_doc(registry: Registry, defn: MarkerDefinition) -> MarkerDoc:
    help = registry.help_for(defn) or MarkerHelp()
    fields = help.fields
    if not fields and defn.is_struct:
        fields = fields_from_model(defn.output_type)
    return MarkerDoc(
        name=defn.name,
        target=defn.target.value,
        category=help.category,
        summary=help.summary,
        details=help.details.strip(),
        deprecated_in_favor_of=help.deprecated_in_favor_of,
        value_type=None if defn.is_struct else type_name(defn.output_type),
        value_field=defn.value_field,
        fields=fields,
    )


def option_rank(doc: MarkerDoc) -> int:
    """Order of a command line marker: generators, per-generator outputs,
    default outputs, then everything else."""
    if doc.name.startswith(f"{OUTPUT_PREFIX}:"):
        return 1 if doc.name.count(":") > 1 else 2
    return 0 if doc.category == "generators" else 3


def sort_by_category(categories: list[CategoryDoc]) -> list[CategoryDoc]:
    """Categories and markers alphabetically."""
    return [
        CategoryDoc(category=c.category, markers=sorted(c.markers, key=lambda m: m.name))
        for c in sorted(categories, key=lambda c: c.category)
    ]


def sort_by_option(categories: list[CategoryDoc]) -> list[CategoryDoc]:
    """Categories in command line order, by their most prominent marker.
    Uncategorized markers come last."""

    def marker_key(m: MarkerDoc) -> tuple[int, str]:
        return option_rank(m), m.name

    cats = [
        CategoryDoc(category=c.category, markers=sorted(c.markers, key=marker_key))
        for c in categories
    ]
    return sorted(cats, key=lambda c: (not c.category, min(marker_key(m) for m in c.markers), c.category))


def by_category(registry: Registry, sorter: SortGroup = sort_by_category) -> list[CategoryDoc]:
    """Marker docs grouped by help category. Does not modify the registry."""
    groups: dict[str, CategoryDoc] = {}
    for defn in registry:
        doc = marker_doc(registry, defn)
        groups.setdefault(doc.category, CategoryDoc(category=doc.category)).markers.append(doc)
    return sorter(list(groups.values()))
