"""
Artifact model — the unit of output produced by every generator.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class Artifact(BaseModel):
    """A named payload produced by a generator.

    Attributes:
        path:    Relative path of the artifact inside its destination.
        content: Payload bytes (``str`` input is UTF-8 encoded).
        kind:    ``config`` for manifests/schemas, ``code`` for source files.
        package: Source package directory a code artifact belongs to.
        reason:  Why this artifact was generated.
    """

    path: str
    content: bytes
    kind: Literal["config", "code"] = "config"
    package: Path | None = None
    reason: str = ""
