"""
Receipt model — the outcome of running one generator.

The engine never lets a generator's exception escape: every outcome,
including output failures, is captured here and attributed to the
generator that owns it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one generator invocation."""

    generator: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output_rule: str = ""
    written: list[str] = Field(default_factory=list)  # destinations written
    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the generator succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the generator failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, generator: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(generator=generator, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, generator: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(generator=generator, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, generator: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(generator=generator, status="skipped", output=reason, **kwargs)
