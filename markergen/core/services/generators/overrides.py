"""
Overrides generator — all-optional mirror types for partial overrides.

Every root type, and every scanned type it reaches, gets a
``<Type>ParentOverride`` (or ``<Type>PluginOverride``) pydantic model in
which each field is optional, so a document can override only part of
an inherited definition.
"""

from __future__ import annotations

import ast

from pydantic import Field

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator, GeneratorOptions
from markergen.core.services.generators.openapi import strip_optional
from markergen.core.services.generators.source import (
    GENERATED_PREFIX,
    TypeInfo,
    by_package,
    code_header,
    load_types,
)


class OverridesOptions(GeneratorOptions):
    is_for_plugin_overrides: bool = Field(
        default=False,
        description="Generate plugin overrides instead of parent overrides.",
    )


class OverridesGenerator(Generator):
    options_model = OverridesOptions
    summary = "generates override types where every field is optional"

    @property
    def name(self) -> str:
        return "overrides"

    def markers(self):
        return vocab.with_help(vocab.ROOT, vocab.IGNORE)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        options = context.options
        assert isinstance(options, OverridesOptions)
        suffix = "PluginOverride" if options.is_for_plugin_overrides else "ParentOverride"
        types = load_types(context.roots, context.exclude, self.source_registry)
        known = {t.name: t for t in types}
        wanted = self._reachable([t for t in types if t.markers.get(vocab.ROOT.name)], known)

        artifacts = []
        for package, infos in by_package([t for t in types if t.name in wanted]).items():
            lines = [code_header(self.name), "from __future__ import annotations", "", "from pydantic import BaseModel"]
            for module in sorted({t.module for t in infos}):
                lines.append(f"from .{module} import *  # noqa: F403")
            for info in infos:
                lines.extend(self._render(info, known, suffix))
            artifacts.append(
                Artifact(
                    path=f"{GENERATED_PREFIX}_{suffix.lower()}s.py",
                    content="\n".join(lines) + "\n",
                    kind="code",
                    package=package,
                    reason=f"{suffix} types",
                )
            )
        return artifacts

    @staticmethod
    def _reachable(roots: list[TypeInfo], known: dict[str, TypeInfo]) -> set[str]:
        seen: set[str] = set()
        stack = [t.name for t in roots]
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.add(name)
            for f in known[name].visible_fields():
                for node in ast.walk(f.annotation):
                    if isinstance(node, ast.Name) and node.id in known:
                        stack.append(node.id)
        return seen

    @staticmethod
    def _render(info: TypeInfo, known: dict[str, TypeInfo], suffix: str) -> list[str]:
        lines = ["", "", f"class {info.name}{suffix}(BaseModel):"]
        lines.append(f'    """Partial {info.name}: every field is optional."""')
        fields = info.visible_fields()
        for f in fields:
            annotation = _rename(strip_optional(f.annotation), known, suffix)
            lines.append(f"    {f.name}: {ast.unparse(annotation)} | None = None")
        return lines


def _rename(node: ast.expr, known: dict[str, TypeInfo], suffix: str) -> ast.expr:
    """Point references to scanned types at their override types."""

    class _Renamer(ast.NodeTransformer):
        def visit_Name(self, name: ast.Name) -> ast.Name:
            if name.id in known:
                return ast.copy_location(ast.Name(id=name.id + suffix, ctx=name.ctx), name)
            return name

    return _Renamer().visit(ast.parse(ast.unparse(node), mode="eval")).body
