"""
Engine executor — runs an executable configuration.

Generators run one at a time, in resolved order. A failing generator is
recorded in its receipt and the remaining generators still run; the
report says whether everything succeeded.

Flow:
    task → generate → open destination per artifact → write → receipt
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from markergen.core.engine.builder import ExecutableConfiguration, GeneratorTask
from markergen.core.errors import GenerationError, OutputError
from markergen.core.models.receipt import Receipt
from markergen.core.services.generators.base import GenerationContext

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReport:
    """Result of running every generator of a configuration."""

    receipts: list[Receipt] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.status == "skipped")

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    @property
    def errors(self) -> dict[str, str]:
        """Error message per failed generator."""
        return {r.generator: r.error or "" for r in self.receipts if r.failed}

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class ExecutionRuntime:
    """Runs the generators of one configuration, exactly once."""

    def __init__(self, config: ExecutableConfiguration):
        self._config = config
        self._consumed = False

    @property
    def config(self) -> ExecutableConfiguration:
        return self._config

    def run(self) -> ExecutionReport:
        """Run every task in order and collect receipts.

        Raises:
            RuntimeError: the runtime already ran.
        """
        if self._consumed:
            raise RuntimeError("execution runtime has already run")
        self._consumed = True

        report = ExecutionReport()
        for task in self._config.tasks:
            receipt = self._run_task(task)
            report.receipts.append(receipt)

            status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
            logger.info("%s %s → %s", status_marker, task.name, receipt.status)

        return report

    def _run_task(self, task: GeneratorTask) -> Receipt:
        start_time = time.monotonic()
        rule = str(task.output_rule)

        if not task.enabled:
            return Receipt.skip(
                generator=task.name,
                reason=f"{task.name} disabled",
                output_rule=rule,
            )

        context = GenerationContext(
            roots=self._config.roots,
            options=task.options,
            exclude=self._config.exclude,
        )

        written: list[str] = []
        try:
            artifacts = task.generator.generate(context)
            for artifact in artifacts:
                with task.output_rule.open(task.name, artifact) as fh:
                    fh.write(artifact.content)
                written.append(task.output_rule.destination(task.name, artifact))
        except (GenerationError, OutputError) as e:
            logger.error("%s failed: %s", task.name, e)
            receipt = Receipt.failure(generator=task.name, error=str(e), output_rule=rule, written=written)
        except OSError as e:
            logger.error("%s failed writing output: %s", task.name, e)
            receipt = Receipt.failure(
                generator=task.name,
                error=f"output error: {e}",
                output_rule=rule,
                written=written,
            )
        except Exception as e:
            # anything else is a generator bug; still only this generator fails
            logger.exception("Generator %s raised unexpectedly", task.name)
            receipt = Receipt.failure(
                generator=task.name,
                error=f"Unexpected error: {e}",
                output_rule=rule,
                written=written,
            )
        else:
            receipt = Receipt.success(
                generator=task.name,
                output=f"{len(written)} artifact(s)",
                output_rule=rule,
                written=written,
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt
