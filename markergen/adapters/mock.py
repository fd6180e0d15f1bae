"""
Mock output rule — in-memory destination for tests and dry checks.

Captures every artifact written through it instead of touching the
filesystem. Can be told to fail on open to simulate unwritable
destinations.
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO, ClassVar

from pydantic import PrivateAttr

from markergen.adapters.base import OutputRule
from markergen.core.errors import OutputError
from markergen.core.models.artifact import Artifact


class MockOutputRule(OutputRule):
    """Output rule that keeps written artifacts in memory."""

    name: ClassVar[str] = "mock"

    fail: bool = False

    _written: dict[str, bytes] = PrivateAttr(default_factory=dict)

    @property
    def written(self) -> dict[str, bytes]:
        """Everything written so far, keyed by ``<generator>/<path>``."""
        return self._written

    def open(self, generator: str, artifact: Artifact):
        if self.fail:
            raise OutputError(f"mock destination for {generator} refused {artifact.path}")
        return self._capture(self.destination(generator, artifact))

    def destination(self, generator: str, artifact: Artifact) -> str:
        return f"{generator}/{artifact.path}"

    @contextmanager
    def _capture(self, key: str) -> Iterator[BinaryIO]:
        buf = io.BytesIO()
        yield buf
        self._written[key] = buf.getvalue()

    def reset(self) -> None:
        """Forget everything written."""
        self._written.clear()
