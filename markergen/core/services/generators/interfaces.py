"""
Interfaces generator — visitor helpers for union types.

A union (``# +markergen:union``) has exactly one field set. For each one
this generates ``<union>_member(obj)`` returning the name of the set
field, and ``visit_<union>(obj, **visitors)`` dispatching on it.
"""

from __future__ import annotations

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator
from markergen.core.services.generators.source import (
    GENERATED_PREFIX,
    TypeInfo,
    by_package,
    code_header,
    load_types,
    snake,
)

OUTPUT_FILE = f"{GENERATED_PREFIX}_interfaces.py"


class InterfacesGenerator(Generator):
    summary = "generates union member and visitor functions"

    @property
    def name(self) -> str:
        return "interfaces"

    def markers(self):
        return vocab.with_help(vocab.UNION, vocab.IGNORE)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        types = load_types(context.roots, context.exclude, self.source_registry)
        unions = [t for t in types if t.markers.get(vocab.UNION.name)]
        return [
            Artifact(
                path=OUTPUT_FILE,
                content=code_header(self.name) + "".join(self._render(info) for info in infos),
                kind="code",
                package=package,
                reason=f"interfaces for {len(infos)} unions",
            )
            for package, infos in by_package(unions).items()
        ]

    def _render(self, info: TypeInfo) -> str:
        fname = snake(info.name)
        members = ", ".join(repr(f.name) for f in info.visible_fields())
        return f'''

_{fname.upper()}_MEMBERS = ({members}{"," if len(info.visible_fields()) == 1 else ""})


def {fname}_member(obj):
    """Name of the single field set on a {info.name}."""
    set_fields = [m for m in _{fname.upper()}_MEMBERS if getattr(obj, m) is not None]
    if len(set_fields) != 1:
        raise ValueError(f"{info.name} must have exactly one member set, got {{set_fields}}")
    return set_fields[0]


def visit_{fname}(obj, **visitors):
    """Call the visitor named after the member set on a {info.name}."""
    member = {fname}_member(obj)
    visitor = visitors.get(member)
    if visitor is None:
        raise KeyError(f"no visitor for {info.name} member {{member!r}}")
    return visitor(getattr(obj, member))
'''
