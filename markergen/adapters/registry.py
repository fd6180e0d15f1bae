"""
Output rule registry — the closed set of known output forms.

Each rule name turns into two command line markers:
``output:<generator>:<rule>`` (per-generator) and ``output:<rule>``
(default for every generator without its own rule).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from markergen.adapters.base import OutputRule
from markergen.adapters.filesystem import OutputArtifacts, OutputToDirectory
from markergen.adapters.stream import OutputToNothing, OutputToStdout
from markergen.core.errors import MarkerDefinitionError

logger = logging.getLogger(__name__)


class OutputRuleRegistry(Mapping[str, type[OutputRule]]):
    """Read-only mapping of rule name to rule class, fixed at construction."""

    def __init__(self, rules: Iterable[type[OutputRule]]):
        self._rules: dict[str, type[OutputRule]] = {}
        for rule in rules:
            if rule.name in self._rules:
                raise MarkerDefinitionError(f"output rule {rule.name!r} defined twice")
            self._rules[rule.name] = rule
            logger.debug("Registered output rule: %s", rule.name)

    def __getitem__(self, name: str) -> type[OutputRule]:
        return self._rules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"<OutputRuleRegistry {list(self._rules)}>"


ALL_OUTPUT_RULES = OutputRuleRegistry(
    [
        OutputToDirectory,
        OutputToNothing,
        OutputToStdout,
        OutputArtifacts,
    ]
)
