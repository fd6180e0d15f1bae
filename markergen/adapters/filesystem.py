"""
Filesystem output rules — write artifacts into directories.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, ClassVar

from pydantic import Field

from markergen.adapters.base import OutputRule
from markergen.core.errors import OutputError
from markergen.core.models.artifact import Artifact

logger = logging.getLogger(__name__)


def _safe_join(root: Path, relative: str) -> Path:
    """Join ``relative`` under ``root``, refusing paths that escape it."""
    base = root.resolve()
    target = (base / relative).resolve()
    if not target.is_relative_to(base):
        raise OutputError(f"artifact path {relative!r} escapes {root}")
    return target


def _anchor(base: Path, path: str | None) -> str | None:
    if path is None or Path(path).is_absolute():
        return path
    return str(base / path)


@contextmanager
def _open_file(path: Path) -> Iterator[BinaryIO]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = path.open("wb")
    except OSError as e:
        raise OutputError(f"cannot open {path}: {e}") from e
    logger.debug("Writing %s", path)
    with fh:
        yield fh


class OutputToDirectory(OutputRule):
    """Every artifact is written below the given directory, keeping its
    relative path. Missing directories are created."""

    name: ClassVar[str] = "dir"
    summary: ClassVar[str] = "outputs each artifact to the given directory"
    marker_value_field: ClassVar[str | None] = "path"

    path: str = Field(min_length=1, description="Directory to write artifacts into.")

    def open(self, generator: str, artifact: Artifact):
        return _open_file(_safe_join(Path(self.path), artifact.path))

    def destination(self, generator: str, artifact: Artifact) -> str:
        return str(Path(self.path) / artifact.path)

    def anchored(self, base: Path) -> OutputToDirectory:
        return self.model_copy(update={"path": _anchor(base, self.path)})


class OutputArtifacts(OutputRule):
    """Config artifacts (manifests, schemas) go to the ``config``
    directory. Code artifacts go to the ``code`` directory when set,
    otherwise next to the source package they were generated from."""

    name: ClassVar[str] = "artifacts"
    summary: ClassVar[str] = "outputs artifacts to different locations, depending on whether they're package-associated or not"

    config: str | None = Field(default=None, description="Directory for non-package-associated artifacts.")
    code: str | None = Field(
        default=None,
        description="Directory for package-associated code artifacts.\n\n"
        "Defaults to the package directory the code was generated from.",
    )

    def _root(self, generator: str, artifact: Artifact) -> Path:
        if artifact.kind == "config":
            if not self.config:
                raise OutputError(
                    f"no config directory set, use output:{generator}:artifacts:config=<dir>"
                )
            return Path(self.config)
        if self.code:
            return Path(self.code)
        if artifact.package is None:
            raise OutputError(f"code artifact {artifact.path!r} has no source package")
        return artifact.package

    def open(self, generator: str, artifact: Artifact):
        return _open_file(_safe_join(self._root(generator, artifact), artifact.path))

    def destination(self, generator: str, artifact: Artifact) -> str:
        try:
            return str(self._root(generator, artifact) / artifact.path)
        except OutputError:
            return artifact.path

    def anchored(self, base: Path) -> OutputArtifacts:
        return self.model_copy(
            update={"config": _anchor(base, self.config), "code": _anchor(base, self.code)}
        )
