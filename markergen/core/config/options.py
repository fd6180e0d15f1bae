"""
Options registry — every marker accepted on the command line.

Built once at startup from the generator and output rule registries:

    <generator>                  generator options
    output:<generator>:<rule>    per-generator output destination
    output:<rule>                default output destination
    paths, exclude               common runtime markers

Names are unique across the merged namespace. A collision means two
generators or rules chose clashing names; construction fails and the
entry point aborts before any command runs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache

from markergen.adapters.base import OutputRule
from markergen.core.markers.args import MarkerList
from markergen.core.markers.definition import TargetType, make_definition
from markergen.core.markers.help import MarkerHelp
from markergen.core.markers.registry import Registry
from markergen.core.services.generators.base import Generator

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "output"
PATHS_MARKER = "paths"
EXCLUDE_MARKER = "exclude"

PATHS = make_definition(PATHS_MARKER, TargetType.PACKAGE, MarkerList)
EXCLUDE = make_definition(EXCLUDE_MARKER, TargetType.PACKAGE, MarkerList)


def output_marker_name(rule: str, generator: str | None = None) -> str:
    """``output:<rule>`` or ``output:<generator>:<rule>``."""
    if generator is None:
        return f"{OUTPUT_PREFIX}:{rule}"
    return f"{OUTPUT_PREFIX}:{generator}:{rule}"


def split_output_marker(name: str) -> tuple[str, str | None]:
    """Inverse of :func:`output_marker_name`: ``(rule, generator or None)``."""
    rest = name[len(OUTPUT_PREFIX) + 1:]
    generator, _, rule = rest.rpartition(":")
    return rule, (generator or None)


def register_options_markers(registry: Registry) -> None:
    """Register the common runtime markers."""
    registry.register(PATHS)
    registry.add_help(
        PATHS,
        MarkerHelp(
            category="common",
            summary="source roots to scan, as paths={./a,./b} or paths=./a;./b (default: .)",
        ),
    )
    registry.register(EXCLUDE)
    registry.add_help(
        EXCLUDE,
        MarkerHelp(summary="glob patterns of source files to skip, relative to each root"),
    )


def _register_rule(registry: Registry, rule_name: str, rule: type[OutputRule], generator: str | None = None) -> None:
    defn = make_definition(output_marker_name(rule_name, generator), TargetType.PACKAGE, rule)
    registry.register(defn)
    help = rule.help()
    if help is not None:
        if generator is not None:
            help = help.model_copy(update={"category": f"{help.category} for {generator}"})
        registry.add_help(defn, help)


def build_options_registry(
    generators: Mapping[str, Generator],
    output_rules: Mapping[str, type[OutputRule]],
) -> Registry:
    """Merge generator, output and common markers into one frozen registry.

    Raises:
        MarkerCollisionError: two markers share a name.
        MarkerDefinitionError: a generator or rule name is not a valid marker name.
    """
    registry = Registry()

    for gen_name, gen in generators.items():
        defn = make_definition(gen_name, TargetType.PACKAGE, gen.options_model)
        registry.register(defn)
        help = gen.help()
        if help is not None:
            registry.add_help(defn, help)

        for rule_name, rule in output_rules.items():
            _register_rule(registry, rule_name, rule, gen_name)

    for rule_name, rule in output_rules.items():
        _register_rule(registry, rule_name, rule)

    register_options_markers(registry)

    logger.debug(
        "Built options registry: %d generators, %d output rules, %d markers",
        len(generators),
        len(output_rules),
        len(registry),
    )
    return registry.freeze()


@lru_cache(maxsize=1)
def default_options_registry() -> Registry:
    """The process-wide registry for the built-in generators and rules."""
    from markergen.adapters.registry import ALL_OUTPUT_RULES
    from markergen.core.services.generators.registry import ALL_GENERATORS

    return build_options_registry(ALL_GENERATORS, ALL_OUTPUT_RULES)
