"""
Generators — produce artifacts from Python source roots.

Each generator implements the ``Generator`` contract from ``base`` and
returns a list of ``Artifact`` instances; the engine decides where
they are written.
"""

from markergen.core.services.generators.base import GenerationContext, Generator, GeneratorOptions
from markergen.core.services.generators.registry import ALL_GENERATORS, GeneratorRegistry

__all__ = [
    "ALL_GENERATORS",
    "GenerationContext",
    "Generator",
    "GeneratorOptions",
    "GeneratorRegistry",
]
