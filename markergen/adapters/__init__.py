"""Adapters — output rules that write artifacts to their destinations.

Public re-exports for convenient access.
"""

from markergen.adapters.base import OutputRule
from markergen.adapters.filesystem import OutputArtifacts, OutputToDirectory
from markergen.adapters.mock import MockOutputRule
from markergen.adapters.registry import ALL_OUTPUT_RULES, OutputRuleRegistry
from markergen.adapters.stream import OutputToNothing, OutputToStdout

__all__ = [
    "ALL_OUTPUT_RULES",
    "MockOutputRule",
    "OutputArtifacts",
    "OutputRule",
    "OutputRuleRegistry",
    "OutputToDirectory",
    "OutputToNothing",
    "OutputToStdout",
]
