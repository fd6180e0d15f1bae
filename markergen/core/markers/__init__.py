"""Markers — the typed configuration vocabulary.

Public re-exports for convenient access.
"""

from markergen.core.markers.args import MarkerList
from markergen.core.markers.definition import MarkerDefinition, TargetType, make_definition
from markergen.core.markers.help import FieldHelp, MarkerHelp, model_help
from markergen.core.markers.registry import Registry

__all__ = [
    "FieldHelp",
    "MarkerDefinition",
    "MarkerHelp",
    "MarkerList",
    "Registry",
    "TargetType",
    "make_definition",
    "model_help",
]
