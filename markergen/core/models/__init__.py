"""Domain models — artifacts and execution receipts."""

from markergen.core.models.artifact import Artifact
from markergen.core.models.receipt import Receipt

__all__ = ["Artifact", "Receipt"]
