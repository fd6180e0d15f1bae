"""
Stream output rules — standard output and the discard sink.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO, ClassVar

from markergen.adapters.base import OutputRule
from markergen.core.models.artifact import Artifact


class _Discard:
    """Binary sink that accepts and drops everything."""

    def write(self, data: bytes) -> int:
        return len(data)


@contextmanager
def _nothing() -> Iterator[BinaryIO]:
    yield _Discard()  # type: ignore[misc]


@contextmanager
def _stdout() -> Iterator[BinaryIO]:
    sys.stdout.flush()
    stream = sys.stdout.buffer
    yield stream
    stream.flush()


class OutputToNothing(OutputRule):
    """Artifacts are generated and then dropped. Useful for checking that
    generation succeeds without touching the tree."""

    name: ClassVar[str] = "none"
    summary: ClassVar[str] = "skips outputting anything"

    def open(self, generator: str, artifact: Artifact):
        return _nothing()

    def destination(self, generator: str, artifact: Artifact) -> str:
        return "<discarded>"


class OutputToStdout(OutputRule):
    """Artifacts are written one after another to standard output."""

    name: ClassVar[str] = "stdout"
    summary: ClassVar[str] = "outputs everything to standard output, with no separators"

    def open(self, generator: str, artifact: Artifact):
        return _stdout()

    def destination(self, generator: str, artifact: Artifact) -> str:
        return "<stdout>"
