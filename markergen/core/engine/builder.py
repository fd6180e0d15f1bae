"""
Runtime builder — turns command line option tokens into an executable
configuration.

Flow:
    tokens → lookup marker → parse value → classify → resolve outputs → tasks

Tokens are applied in order and a repeated marker overwrites its earlier
value. Output rules resolve per generator with this precedence:

    output:<generator>:<rule>  >  output:<rule>  >  generator default

Two different rule forms activated at the same level are ambiguous and
rejected rather than silently picking one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

from markergen.adapters.base import OutputRule
from markergen.core.config.options import (
    EXCLUDE_MARKER,
    OUTPUT_PREFIX,
    PATHS_MARKER,
    split_output_marker,
)
from markergen.core.errors import (
    AmbiguousOutputError,
    NoGeneratorsError,
    OptionParseError,
    UnknownMarkerError,
)
from markergen.core.markers.definition import MarkerDefinition
from markergen.core.markers.registry import Registry
from markergen.core.services.generators.base import Generator, GeneratorOptions

logger = logging.getLogger(__name__)

OutputSource = Literal["generator", "default", "builtin"]


@dataclass
class ResolvedOption:
    """One option token and the value it parsed into."""

    definition: MarkerDefinition
    raw: str
    value: Any


@dataclass
class GeneratorTask:
    """A generator, its options, and where its output goes."""

    name: str
    generator: Generator
    options: GeneratorOptions
    output_rule: OutputRule
    output_source: OutputSource = "builtin"

    @property
    def enabled(self) -> bool:
        return self.options.enabled


@dataclass
class ExecutableConfiguration:
    """Everything needed to run one invocation."""

    tasks: list[GeneratorTask] = field(default_factory=list)
    roots: list[Path] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    options: list[ResolvedOption] = field(default_factory=list)

    @property
    def generator_names(self) -> list[str]:
        return [t.name for t in self.tasks]

    def task(self, name: str) -> GeneratorTask | None:
        for t in self.tasks:
            if t.name == name:
                return t
        return None


@dataclass
class _OutputChoice:
    rule_name: str
    rule: OutputRule
    raw: str


def parse_options(registry: Registry, tokens: list[str]) -> list[ResolvedOption]:
    """Resolve and parse every token, in order.

    Raises:
        UnknownMarkerError: no marker matches a token.
        OptionParseError: a token's value does not fit its marker.
    """
    resolved = []
    for raw in tokens:
        defn = registry.lookup(raw)
        if defn is None:
            raise UnknownMarkerError(raw)
        try:
            value = defn.parse(raw)
        except ValueError as e:
            raise OptionParseError(f"unable to parse option {raw!r}: {e}", token=raw) from e
        resolved.append(ResolvedOption(definition=defn, raw=raw, value=value))
    return resolved


def anchor_options(resolved: list[ResolvedOption], base: Path) -> list[ResolvedOption]:
    """Resolve relative source roots and output directories against ``base``."""
    anchored = []
    for opt in resolved:
        if isinstance(opt.value, OutputRule):
            opt = replace(opt, value=opt.value.anchored(base))
        elif opt.definition.name == PATHS_MARKER:
            opt = replace(opt, value=[p if Path(p).is_absolute() else str(base / p) for p in opt.value])
        anchored.append(opt)
    return anchored


def _choose(current: _OutputChoice | None, new: _OutputChoice, what: str) -> _OutputChoice:
    if current is not None and current.rule_name != new.rule_name:
        raise AmbiguousOutputError(
            f"conflicting output rules {what}: {current.raw!r} and {new.raw!r}",
            token=new.raw,
        )
    return new


def from_options(
    registry: Registry,
    tokens: list[str],
    generators: Mapping[str, Generator],
    config_tokens: list[str] | None = None,
    config_dir: Path | None = None,
) -> ExecutableConfiguration:
    """Build the executable configuration for a list of option tokens.

    Args:
        registry: Options registry built from ``generators``.
        tokens: Raw option tokens, applied in order.
        generators: Generator registry the options registry was built from.
        config_tokens: Tokens from markergen.yml, applied before ``tokens``.
        config_dir: Directory relative paths in ``config_tokens`` are
            resolved against (default: cwd).

    Raises:
        OptionParseError: unknown marker, bad value, ambiguous outputs,
            output for a generator that was not requested, missing roots,
            or no generators at all (``NoGeneratorsError``).
    """
    resolved = parse_options(registry, config_tokens or [])
    if config_dir is not None:
        resolved = anchor_options(resolved, config_dir)
    resolved += parse_options(registry, tokens)

    gen_options: dict[str, GeneratorOptions] = {}
    by_generator: dict[str, _OutputChoice] = {}
    default: _OutputChoice | None = None
    paths: list[str] = ["."]
    exclude: list[str] = []

    for opt in resolved:
        name = opt.definition.name
        if name in generators:
            # dict assignment keeps the first-activation position
            gen_options[name] = opt.value
        elif isinstance(opt.value, OutputRule):
            rule_name, gen_name = split_output_marker(name)
            choice = _OutputChoice(rule_name=rule_name, rule=opt.value, raw=opt.raw)
            if gen_name is None:
                default = _choose(default, choice, "for the default output")
            else:
                by_generator[gen_name] = _choose(
                    by_generator.get(gen_name), choice, f"for generator {gen_name!r}"
                )
        elif name == PATHS_MARKER:
            paths = opt.value
        elif name == EXCLUDE_MARKER:
            exclude = opt.value
        else:
            raise OptionParseError(f"unknown option marker {name!r}", token=opt.raw)

    for gen_name, choice in by_generator.items():
        if gen_name not in gen_options:
            raise OptionParseError(
                f"output rule {choice.raw!r} given for non-invoked generator {gen_name!r}",
                token=choice.raw,
            )

    if not gen_options:
        raise NoGeneratorsError()

    roots = _resolve_roots(paths)

    config = ExecutableConfiguration(roots=roots, exclude=exclude, options=resolved)
    for gen_name, options in gen_options.items():
        generator = generators[gen_name]
        if gen_name in by_generator:
            rule, source = by_generator[gen_name].rule, "generator"
        elif default is not None:
            rule, source = default.rule, "default"
        else:
            rule, source = generator.default_output(), "builtin"
        config.tasks.append(
            GeneratorTask(
                name=gen_name,
                generator=generator,
                options=options,
                output_rule=rule,
                output_source=source,
            )
        )
        logger.debug("Resolved %s → %s (%s)", gen_name, rule, source)

    return config


def _resolve_roots(paths: list[str]) -> list[Path]:
    if not paths:
        raise OptionParseError("paths must name at least one source root", token=PATHS_MARKER)
    roots = []
    for p in paths:
        root = Path(p)
        if not root.is_dir():
            raise OptionParseError(f"source root {p!r} is not a directory", token=f"{PATHS_MARKER}={p}")
        roots.append(root)
    return roots


def registry_from_options(
    registry: Registry,
    tokens: list[str],
    generators: Mapping[str, Generator],
) -> Registry:
    """The registry to document for ``-w``.

    Without tokens this is the whole options registry. Otherwise it holds
    the option markers named by the tokens, each named generator's output
    markers, and the source markers those generators understand. Nothing
    is loaded or generated.
    """
    if not tokens:
        return registry

    resolved = parse_options(registry, tokens)
    names: list[str] = []
    gen_names: list[str] = []
    for opt in resolved:
        name = opt.definition.name
        if name not in names:
            names.append(name)
        if name in generators and name not in gen_names:
            gen_names.append(name)
            names.extend(
                n for n in registry.names
                if n.startswith(f"{OUTPUT_PREFIX}:{name}:") and n not in names
            )

    filtered = registry.subset(names)
    for gen_name in gen_names:
        generators[gen_name].register_markers(filtered)
    return filtered.freeze()
