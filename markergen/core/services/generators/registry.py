"""
Generator registry — the closed set of known generators, giving them
names for use on the command line.

Each generator turns into a command line marker, and has one output
marker per output rule.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from markergen.core.errors import MarkerDefinitionError
from markergen.core.services.generators.base import Generator
from markergen.core.services.generators.crds import CrdGenerator
from markergen.core.services.generators.deepcopy import DeepCopyGenerator
from markergen.core.services.generators.getters import GettersGenerator
from markergen.core.services.generators.interfaces import InterfacesGenerator
from markergen.core.services.generators.overrides import OverridesGenerator
from markergen.core.services.generators.schemas import SchemaGenerator
from markergen.core.services.generators.validate import ValidateGenerator

logger = logging.getLogger(__name__)


class GeneratorRegistry(Mapping[str, Generator]):
    """Read-only mapping of generator name to generator, fixed at construction."""

    def __init__(self, generators: Iterable[Generator]):
        self._generators: dict[str, Generator] = {}
        for gen in generators:
            if gen.name in self._generators:
                raise MarkerDefinitionError(f"generator {gen.name!r} defined twice")
            self._generators[gen.name] = gen
            logger.debug("Registered generator: %s", gen.name)

    def __getitem__(self, name: str) -> Generator:
        return self._generators[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)

    def __repr__(self) -> str:
        return f"<GeneratorRegistry {list(self._generators)}>"


ALL_GENERATORS = GeneratorRegistry(
    [
        OverridesGenerator(),
        InterfacesGenerator(),
        CrdGenerator(),
        DeepCopyGenerator(),
        SchemaGenerator(),
        ValidateGenerator(),
        GettersGenerator(),
    ]
)
