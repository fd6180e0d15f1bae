"""
Deep-copy generator — ``deepcopy_<type>`` functions for every class.

Fields whose type is another scanned class are copied with that class's
own function; everything else goes through ``copy.deepcopy``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from markergen.core.errors import GenerationError
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
    snake,
)

OUTPUT_FILE = f"{GENERATED_PREFIX}_deepcopy.py"


class DeepCopyOptions(GeneratorOptions):
    header_file: str | None = Field(default=None, description="File whose contents prefix every generated file.")
    year: str | None = Field(default=None, description="Replaces ' YEAR' in the header file.")


class DeepCopyGenerator(Generator):
    """Generates ``zz_generated_deepcopy.py`` in each package with classes.
    Opt a class out with ``# +markergen:generate=false``."""

    options_model = DeepCopyOptions
    summary = "generates deep-copy functions"

    @property
    def name(self) -> str:
        return "deepcopy"

    def markers(self):
        return vocab.with_help(vocab.GENERATE)

    def generate(self, context: GenerationContext) -> list[Artifact]:
        options = context.options
        assert isinstance(options, DeepCopyOptions)
        header = self._header(options)
        types = [
            t for t in load_types(context.roots, context.exclude, self.source_registry)
            if t.markers.get(vocab.GENERATE.name, True)
        ]

        artifacts = []
        for package, infos in by_package(types).items():
            local = {t.name for t in infos}
            lines = [header + code_header(self.name), "import copy", ""]
            for info in infos:
                lines.extend(self._function(info, local))
            artifacts.append(
                Artifact(
                    path=OUTPUT_FILE,
                    content="\n".join(lines),
                    kind="code",
                    package=package,
                    reason=f"deep copies for {len(infos)} types",
                )
            )
        return artifacts

    def _function(self, info: TypeInfo, local: set[str]) -> list[str]:
        lines = [
            "",
            f"def deepcopy_{snake(info.name)}(src):",
            f'    """Return a deep copy of a {info.name}."""',
            "    if src is None:",
            "        return None",
        ]
        if not info.fields:
            lines += ["    return copy.deepcopy(src)", ""]
            return lines
        lines.append("    return src.__class__(")
        for f in info.fields:
            target = strip_optional(f.annotation)
            name = getattr(target, "id", None)
            if name in local:
                lines.append(f"        {f.name}=deepcopy_{snake(name)}(src.{f.name}),")
            else:
                lines.append(f"        {f.name}=copy.deepcopy(src.{f.name}),")
        lines += ["    )", ""]
        return lines

    @staticmethod
    def _header(options: DeepCopyOptions) -> str:
        if not options.header_file:
            return ""
        try:
            text = Path(options.header_file).read_text(encoding="utf-8")
        except OSError as e:
            raise GenerationError(f"cannot read header file {options.header_file}: {e}") from e
        if options.year:
            text = text.replace(" YEAR", f" {options.year}")
        return text if text.endswith("\n") else text + "\n"
