"""
Getters generator — default-aware accessors for optional fields.

For every optional field carrying ``# +markergen:default=<value>`` a
``get_<type>_<field>(obj)`` function returns the field, or the default
when the field is unset.
"""

from __future__ import annotations

from markergen.core.models.artifact import Artifact
from markergen.core.services.generators import vocabulary as vocab
from markergen.core.services.generators.base import GenerationContext, Generator
from markergen.core.services.generators.openapi import literal_value
from markergen.core.services.generators.source import (
    GENERATED_PREFIX,
    by_package,
    code_header,
    load_types,
    snake,
)

OUTPUT_FILE = f"{GENERATED_PREFIX}_getters.py"


class GettersGenerator(Generator):
    """Generates ``zz_generated_getters.py`` in each package that has
    optional fields with defaults."""

    summary = "generates getters that apply field defaults"

    @property
    def name(self) -> str:
        return "getters"

    def markers(self):
        return vocab.with_help(vocab.DEFAULT, vocab.OPTIONAL)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        types = load_types(context.roots, context.exclude, self.source_registry)
        artifacts = []
        for package, infos in by_package(types).items():
            body: list[str] = []
            for info in infos:
                for f in info.fields:
                    default = f.markers.get(vocab.DEFAULT.name)
                    if default is None or not f.optional:
                        continue
                    body += [
                        "",
                        "",
                        f"def get_{snake(info.name)}_{f.name}(obj):",
                        f'    """{info.name}.{f.name}, or {default.value} when unset."""',
                        f"    if obj.{f.name} is None:",
                        f"        return {literal_value(default.value)!r}",
                        f"    return obj.{f.name}",
                    ]
            if body:
                artifacts.append(
                    Artifact(
                        path=OUTPUT_FILE,
                        content=code_header(self.name) + "\n".join(body) + "\n",
                        kind="code",
                        package=package,
                        reason="getters for defaulted fields",
                    )
                )
        return artifacts
