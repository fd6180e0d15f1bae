"""
Output rule base — the contract between the engine and destinations.

An output rule decides where a generator's artifacts are written. Rules
are pydantic models: the model is both the capability and its
configuration (``output:dir=out`` is ``OutputToDirectory(path="out")``).
The engine only talks to destinations through this protocol.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import BinaryIO, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from markergen.core.markers.help import MarkerHelp, model_help
from markergen.core.models.artifact import Artifact


class OutputRule(BaseModel, ABC):
    """Abstract base class for all output rules.

    To create a new output rule:
        1. Subclass OutputRule as a pydantic model (fields = marker fields)
        2. Set ``name``, ``summary`` and optionally ``marker_value_field``
        3. Implement open and destination
        4. Add it to ALL_OUTPUT_RULES
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    name: ClassVar[str]
    summary: ClassVar[str] = ""
    marker_value_field: ClassVar[str | None] = None

    @abstractmethod
    def open(self, generator: str, artifact: Artifact) -> AbstractContextManager[BinaryIO]:
        """Open the destination for one artifact.

        Raises:
            OutputError: the destination cannot be opened. Nothing has
                been written when this is raised.
        """

    @abstractmethod
    def destination(self, generator: str, artifact: Artifact) -> str:
        """Human-readable label of where the artifact goes."""

    def anchored(self, base: Path) -> OutputRule:
        """This rule with its relative directories taken from ``base``.

        Rules that write nowhere on disk return themselves.
        """
        return self

    @classmethod
    def help(cls) -> MarkerHelp | None:
        if not cls.summary:
            return None
        return model_help(cls, category="output rules", summary=cls.summary, details=cls.__doc__ or "")

    def __str__(self) -> str:
        args = ",".join(f"{k}={v}" for k, v in self.model_dump(by_alias=True, exclude_none=True).items())
        return f"{self.name}:{args}" if args else self.name
