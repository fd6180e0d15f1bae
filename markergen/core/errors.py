"""
Error taxonomy — every failure markergen can report.

Construction errors (``RegistryError``) are programming defects in the
generator / output rule set and abort startup. Option errors
(``OptionParseError``) are user mistakes and come with usage text.
Generation and output errors are recorded per generator by the engine.
"""

from __future__ import annotations


class MarkergenError(Exception):
    """Base class for all markergen errors."""


# ── Construction ────────────────────────────────────────────────────


class RegistryError(MarkergenError):
    """The marker namespace could not be constructed."""


class MarkerCollisionError(RegistryError):
    """Two marker definitions share the same name."""

    def __init__(self, name: str):
        super().__init__(f"marker {name!r} is already registered")
        self.name = name


class RegistryFrozenError(RegistryError):
    """Registration attempted after the registry was frozen."""


class MarkerDefinitionError(RegistryError):
    """A marker definition is malformed (bad name, bad target type)."""


# ── User input ──────────────────────────────────────────────────────


class OptionParseError(MarkergenError):
    """A command line option could not be turned into a marker value."""

    def __init__(self, message: str, token: str | None = None):
        super().__init__(message)
        self.token = token


class UnknownMarkerError(OptionParseError):
    """No registered marker matches the option token."""

    def __init__(self, token: str):
        super().__init__(f"unknown option {token!r}", token=token)


class AmbiguousOutputError(OptionParseError):
    """Two different output forms compete for the same generator."""


class NoGeneratorsError(OptionParseError):
    """No generator marker was activated."""

    def __init__(self) -> None:
        super().__init__("no generators specified")


class ConfigError(MarkergenError):
    """Raised when the markergen.yml configuration is invalid."""


# ── Execution ───────────────────────────────────────────────────────


class GenerationError(MarkergenError):
    """A generator failed to produce its artifacts."""


class OutputError(MarkergenError):
    """An output destination could not be opened or written."""
