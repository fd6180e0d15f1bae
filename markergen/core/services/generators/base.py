"""
Generator base — abstract interface for artifact generators.

A generator is an opaque unit: given the source roots and its own typed
options it returns artifacts, or raises :class:`GenerationError`. The
engine never looks inside; it only routes the returned artifacts through
the generator's resolved output rule.

Each generator contributes:
  - an options model — the shape of its ``<generator>`` command line marker
  - help — shown by ``-h`` / ``-w``
  - source markers — ``# +name`` comments it understands in source files
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from markergen.adapters.base import OutputRule
from markergen.adapters.filesystem import OutputArtifacts
from markergen.core.markers.definition import MarkerDefinition
from markergen.core.markers.help import MarkerHelp, model_help
from markergen.core.markers.registry import Registry
from markergen.core.models.artifact import Artifact


class GeneratorOptions(BaseModel):
    """Options shared by every generator marker.

    ``<generator>=false`` sets ``enabled`` and keeps the generator in the
    configuration without running it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    marker_value_field: ClassVar[str | None] = "enabled"

    enabled: bool = Field(default=True, description="Set to false to skip this generator.")


@dataclass
class GenerationContext:
    """Everything a generator needs for one invocation."""

    roots: list[Path]
    options: GeneratorOptions
    exclude: list[str] = field(default_factory=list)


class Generator(ABC):
    """Abstract base class for all generators.

    To create a new generator:
        1. Subclass Generator (and GeneratorOptions if it takes options)
        2. Implement name and generate
        3. Add it to ALL_GENERATORS
    """

    options_model: ClassVar[type[GeneratorOptions]] = GeneratorOptions
    summary: ClassVar[str] = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """The generator identifier, also its command line marker."""

    @abstractmethod
    def generate(self, context: GenerationContext) -> list[Artifact]:
        """Produce artifacts from the source roots.

        Raises:
            GenerationError: the sources cannot be processed.
        """

    def help(self) -> MarkerHelp | None:
        if not self.summary:
            return None
        return model_help(
            self.options_model,
            category="generators",
            summary=self.summary,
            details=self.__class__.__doc__ or "",
        )

    def markers(self) -> list[tuple[MarkerDefinition, MarkerHelp | None]]:
        """Source markers this generator reads."""
        return []

    def register_markers(self, registry: Registry) -> None:
        """Register this generator's source markers.

        Definitions shared between generators are registered once.
        """
        for defn, help in self.markers():
            if registry.get(defn.name) is defn:
                continue
            registry.register(defn)
            if help is not None:
                registry.add_help(defn, help)

    @cached_property
    def source_registry(self) -> Registry:
        reg = Registry()
        self.register_markers(reg)
        return reg.freeze()

    def default_output(self) -> OutputRule:
        """Where artifacts go when no output marker applies."""
        return OutputArtifacts(config=f"config/{self.name}")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
