"""
Help rendering — marker documentation at increasing levels of detail.

Levels follow how often ``-w`` or ``-h`` was given:

    1  summary    one line per marker, grouped by category (stderr)
    2  detailed   summary, details and a field table per marker (stderr)
    3  full       detailed plus field details, uncategorized and
                  deprecated markers (stderr)
    4  json       the categorized docs as JSON (stdout)

Rendering only reads the registry.
"""

from __future__ import annotations

import json
import sys
import textwrap
from enum import IntEnum
from typing import IO

import click

from markergen.core.help.categories import (
    CategoryDoc,
    MarkerDoc,
    SortGroup,
    by_category,
    sort_by_category,
)
from markergen.core.markers.help import FieldHelp
from markergen.core.markers.registry import Registry

_INDENT = "  "
_UNCATEGORIZED = "other"


class HelpLevel(IntEnum):
    SUMMARY = 1
    DETAILED = 2
    FULL = 3
    JSON = 4

    @classmethod
    def from_count(cls, count: int) -> HelpLevel:
        """Level for a repeated flag; extra repeats stay at json."""
        return cls(max(cls.SUMMARY, min(count, cls.JSON)))


def _field_sig(f: FieldHelp) -> str:
    sig = f"{f.name}=<{f.type}>"
    return f"[{sig}]" if f.optional else sig


def signature(doc: MarkerDoc) -> str:
    """Argument signature of a marker, e.g. ``crds:maxDescLen=<int>``."""
    if doc.value_type is not None:
        if doc.value_type == "bool":
            return f"{doc.name}[=<bool>]"
        return f"{doc.name}=<{doc.value_type}>"

    fields = [f for f in doc.fields if f.name != doc.value_field]
    if doc.value_field is not None:
        value = next((f for f in doc.fields if f.name == doc.value_field), None)
        value_type = value.type if value is not None else "value"
        sig = f"{doc.name}[=<{value_type}>]" if value is None or value.optional else f"{doc.name}=<{value_type}>"
    else:
        sig = doc.name
    if fields:
        sig += ":" + ",".join(_field_sig(f) for f in fields)
    return sig


def _visible(categories: list[CategoryDoc], level: HelpLevel) -> list[CategoryDoc]:
    if level >= HelpLevel.FULL:
        return categories
    visible = []
    for cat in categories:
        if not cat.category:
            continue
        markers = [m for m in cat.markers if m.deprecated_in_favor_of is None]
        if markers:
            visible.append(CategoryDoc(category=cat.category, markers=markers))
    return visible


def _header(cat: CategoryDoc) -> str:
    return click.style(cat.category or _UNCATEGORIZED, bold=True)


def render_summary(categories: list[CategoryDoc], err: IO[str]) -> None:
    for cat in categories:
        click.echo(_header(cat), file=err)
        sigs = [signature(m) for m in cat.markers]
        width = max(len(s) for s in sigs)
        for sig, marker in zip(sigs, cat.markers):
            line = f"{_INDENT}{sig.ljust(width)}  {marker.summary}".rstrip()
            click.echo(line, file=err)
        click.echo("", file=err)


def _wrap(text: str, indent: str) -> str:
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    return "\n\n".join(
        textwrap.fill(" ".join(p.split()), width=78, initial_indent=indent, subsequent_indent=indent)
        for p in paragraphs
    )


def render_details(categories: list[CategoryDoc], err: IO[str], full: bool = False) -> None:
    body = _INDENT * 3
    for cat in categories:
        click.echo(_header(cat), file=err)
        click.echo("", file=err)
        for marker in cat.markers:
            click.echo(f"{_INDENT}{click.style(signature(marker), fg='cyan')}", file=err)
            if marker.deprecated_in_favor_of is not None:
                click.echo(f"{body}(deprecated, use {marker.deprecated_in_favor_of})", file=err)
            if marker.summary:
                click.echo(_wrap(marker.summary, body), file=err)
            if marker.details:
                click.echo("", file=err)
                click.echo(_wrap(marker.details, body), file=err)
            if marker.fields:
                click.echo("", file=err)
                _render_fields(marker.fields, err, full)
            click.echo("", file=err)


def _render_fields(fields: list[FieldHelp], err: IO[str], full: bool) -> None:
    indent = _INDENT * 4
    names = [f.name for f in fields]
    types = [f"<{f.type}>" for f in fields]
    name_w = max(len(n) for n in names)
    type_w = max(len(t) for t in types)
    for f, name, typ in zip(fields, names, types):
        opt = "(optional)" if f.optional else ""
        line = f"{indent}{name.ljust(name_w)}  {typ.ljust(type_w)}  {opt:<10}  {f.summary}"
        click.echo(line.rstrip(), file=err)
        if full and f.details:
            click.echo(_wrap(f.details, indent + _INDENT * 2), file=err)


def render_json(categories: list[CategoryDoc], out: IO[str]) -> None:
    data = [c.model_dump() for c in categories]
    click.echo(json.dumps(data, indent=2), file=out)


def render_help(
    level: HelpLevel | int,
    registry: Registry,
    sorter: SortGroup = sort_by_category,
    out: IO[str] | None = None,
    err: IO[str] | None = None,
) -> None:
    """Render the registry's marker docs at ``level``.

    Args:
        level: Help level; counts above json clamp to json.
        registry: Markers to document.
        sorter: Category and marker ordering.
        out: Stream for machine-readable output (json). Defaults to stdout.
        err: Stream for human-readable output. Defaults to stderr.
    """
    level = HelpLevel.from_count(int(level))
    out = out or sys.stdout
    err = err or sys.stderr

    categories = by_category(registry, sorter)
    if level == HelpLevel.JSON:
        render_json(categories, out)
        return

    categories = _visible(categories, level)
    if level == HelpLevel.SUMMARY:
        render_summary(categories, err)
    else:
        render_details(categories, err, full=level == HelpLevel.FULL)
