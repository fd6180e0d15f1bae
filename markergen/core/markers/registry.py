"""
Marker registry — the namespace of known markers.

Names are unique across the whole registry: registering a second
definition under an existing name is a construction error, never an
override. Once built, a registry is frozen and shared read-only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from markergen.core.errors import MarkerCollisionError, RegistryFrozenError
from markergen.core.markers.args import split_marker
from markergen.core.markers.definition import MarkerDefinition, TargetType
from markergen.core.markers.help import MarkerHelp

logger = logging.getLogger(__name__)


class Registry:
    """Insertion-ordered mapping of marker name to definition, plus help."""

    def __init__(self) -> None:
        self._definitions: dict[str, MarkerDefinition] = {}
        self._help: dict[str, MarkerHelp] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> Registry:
        """Make the registry read-only. Returns self for chaining."""
        self._frozen = True
        return self

    def register(self, defn: MarkerDefinition) -> None:
        """Add a definition.

        Raises:
            MarkerCollisionError: the name is already taken.
            RegistryFrozenError: the registry is frozen.
        """
        self._check_mutable()
        if defn.name in self._definitions:
            raise MarkerCollisionError(defn.name)
        self._definitions[defn.name] = defn
        logger.debug("Registered marker: %s", defn.name)

    def add_help(self, defn: MarkerDefinition, help: MarkerHelp) -> None:
        """Attach help to a registered definition."""
        self._check_mutable()
        if self._definitions.get(defn.name) is not defn:
            raise KeyError(f"marker {defn.name!r} is not registered here")
        self._help[defn.name] = help

    def get(self, name: str) -> MarkerDefinition | None:
        return self._definitions.get(name)

    def help_for(self, defn: MarkerDefinition) -> MarkerHelp | None:
        return self._help.get(defn.name)

    def lookup(self, raw: str, target: TargetType = TargetType.PACKAGE) -> MarkerDefinition | None:
        """Find the definition a raw marker refers to.

        The longest registered colon-delimited prefix of the marker's name
        wins, so ``output:crds:artifacts:config=out`` resolves to
        ``output:crds:artifacts`` with ``config`` as a field.
        """
        candidate, _ = split_marker(raw)
        while candidate:
            defn = self._definitions.get(candidate)
            if defn is not None and defn.target == target:
                return defn
            if ":" not in candidate:
                return None
            candidate = candidate.rsplit(":", 1)[0]
        return None

    def subset(self, names: Iterable[str]) -> Registry:
        """A new registry with only the named definitions (and their help)."""
        sub = Registry()
        wanted = set(names)
        for name, defn in self._definitions.items():
            if name in wanted:
                sub.register(defn)
                if name in self._help:
                    sub.add_help(defn, self._help[name])
        return sub

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[MarkerDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        state = " frozen" if self._frozen else ""
        return f"<Registry markers={len(self)}{state}>"

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("marker registry is frozen")
