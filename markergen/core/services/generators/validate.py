"""
Validation generator — ``validate_<type>(obj)`` functions returning a
list of problems, built from field optionality and validation markers.
"""

from __future__ import annotations

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator
from markergen.core.services.generators.openapi import strip_optional
from markergen.core.services.generators.source import (
    GENERATED_PREFIX,
    TypeInfo,
    by_package,
    code_header,
    load_types,
    snake,
)

OUTPUT_FILE = f"{GENERATED_PREFIX}_validate.py"


class ValidateGenerator(Generator):
    summary = "generates validation functions from validation markers"

    @property
    def name(self) -> str:
        return "validate"

    def markers(self):
        return vocab.with_help(vocab.OPTIONAL, vocab.IGNORE, vocab.UNION, *vocab.VALIDATION)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        types = load_types(context.roots, context.exclude, self.source_registry)
        artifacts = []
        for package, infos in by_package(types).items():
            local = {t.name for t in infos}
            lines = [code_header(self.name), "import re"]
            for info in infos:
                lines.extend(self._function(info, local))
            artifacts.append(
                Artifact(
                    path=OUTPUT_FILE,
                    content="\n".join(lines) + "\n",
                    kind="code",
                    package=package,
                    reason=f"validators for {len(infos)} types",
                )
            )
        return artifacts

    def _function(self, info: TypeInfo, local: set[str]) -> list[str]:
        lines = [
            "",
            "",
            f"def validate_{snake(info.name)}(obj, path={info.name!r}):",
            f'    """Problems found in a {info.name}; empty when valid."""',
            "    errors = []",
        ]
        fields = info.visible_fields()
        if info.markers.get(vocab.UNION.name):
            names = [f.name for f in fields]
            lines += [
                f"    set_members = [m for m in {names!r} if getattr(obj, m) is not None]",
                "    if len(set_members) != 1:",
                "        errors.append(f'{path}: exactly one member must be set, got {set_members}')",
            ]
        for f in fields:
            ref = f"obj.{f.name}"
            where = f"{{path}}.{f.name}"
            err = _error_line(f.name)
            checks: list[str] = []
            if vocab.PATTERN.name in f.markers:
                checks += [
                    f"        if not re.fullmatch({f.markers[vocab.PATTERN.name]!r}, {ref}):",
                    err(f"does not match {f.markers[vocab.PATTERN.name]}"),
                ]
            if vocab.MINIMUM.name in f.markers:
                checks += [
                    f"        if {ref} < {f.markers[vocab.MINIMUM.name]}:",
                    err(f"must be >= {f.markers[vocab.MINIMUM.name]}"),
                ]
            if vocab.MAXIMUM.name in f.markers:
                checks += [
                    f"        if {ref} > {f.markers[vocab.MAXIMUM.name]}:",
                    err(f"must be <= {f.markers[vocab.MAXIMUM.name]}"),
                ]
            if vocab.ENUM.name in f.markers:
                allowed = f.markers[vocab.ENUM.name]
                checks += [
                    f"        if {ref} not in {allowed!r}:",
                    err(f"must be one of {allowed}"),
                ]
            nested = getattr(strip_optional(f.annotation), "id", None)
            if nested in local:
                checks.append(f"        errors.extend(validate_{snake(nested)}({ref}, f'{where}'))")

            if not f.optional and f.default is None and not info.markers.get(vocab.UNION.name):
                lines += [f"    if {ref} is None:", f"        errors.append(f'{where}: required')"]
                if checks:
                    lines.append("    else:")
                    lines += checks
            elif checks:
                lines.append(f"    if {ref} is not None:")
                lines += checks
        lines.append("    return errors")
        return lines


def _error_line(field: str):
    """Builds ``errors.append(...)`` lines for one field, message quoted safely."""

    def line(message: str) -> str:
        return f"            errors.append(f'{{path}}.{field}: ' + {message!r})"

    return line
