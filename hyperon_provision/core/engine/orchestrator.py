"""
Orchestrator — runs the fixed step sequence under fail-fast.

Flow per step:
    idempotent and already satisfied → skip (success)
    otherwise                        → run the action
    action raised ProvisionError     → record, report, stop

There is no rollback, no retry, and no timeout. A run that stops early
leaves earlier steps' effects in place; running again starts from the
first step and skips whatever is already satisfied.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.errors import ProvisionError
from hyperon_provision.core.models.step import (
    InstallationReport,
    Step,
    StepOutcome,
    StepRecord,
)
from hyperon_provision.core.observability.reporting import Reporter

logger = logging.getLogger(__name__)


class UnknownStepError(ValueError):
    """A step name that is not part of the sequence."""


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"


class Orchestrator:
    """Executes an ordered list of steps, stopping at the first failure."""

    def __init__(self, steps: Sequence[Step], reporter: Reporter):
        names = [s.name for s in steps]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate step names: {', '.join(sorted(duplicates))}")
        self.steps = list(steps)
        self.reporter = reporter

    @property
    def step_names(self) -> list[str]:
        return [s.name for s in self.steps]

    def select(self, *, start_from: str | None = None, only: str | None = None) -> list[Step]:
        """Slice of the sequence to run.

        Raises:
            UnknownStepError: ``start_from`` or ``only`` names no step.
        """
        for name in (start_from, only):
            if name is not None and name not in self.step_names:
                raise UnknownStepError(
                    f"Unknown step '{name}'. Valid: {', '.join(self.step_names)}"
                )
        if only is not None:
            return [s for s in self.steps if s.name == only]
        if start_from is not None:
            return self.steps[self.step_names.index(start_from):]
        return list(self.steps)

    def run(
        self,
        ctx: WorkspaceContext,
        *,
        start_from: str | None = None,
        only: str | None = None,
        report: InstallationReport | None = None,
    ) -> InstallationReport:
        """Run the selected steps in order.

        Returns:
            The report; ``report.exit_code`` is the process exit status.
        """
        selected = self.select(start_from=start_from, only=only)
        report = report or InstallationReport()
        if not report.operation_id:
            report.operation_id = generate_operation_id()

        total = len(selected)
        for index, step in enumerate(selected, start=1):
            record = self._run_step(step, ctx, index, total)
            report.add(record)
            if record.outcome is StepOutcome.FAILED:
                logger.info("Aborting after failed step '%s'", step.name)
                break

        return report

    def _run_step(self, step: Step, ctx: WorkspaceContext, index: int, total: int) -> StepRecord:
        prefix = f"[{index}/{total}] {step.name}"

        if step.is_satisfied(ctx):
            self.reporter.info(f"{prefix}: {step.description} is already installed. Skipping.")
            return StepRecord(step=step.name, outcome=StepOutcome.SKIPPED)

        self.reporter.info(f"{prefix}: {step.description}...")
        record = StepRecord(step=step.name, outcome=StepOutcome.SUCCEEDED)
        start = time.monotonic()
        try:
            step.action(ctx)
        except ProvisionError as e:
            record.outcome = StepOutcome.FAILED
            record.error = str(e)
            record.return_code = e.exit_code
            self.reporter.error(f"{step.name}: {e}")
        except OSError as e:
            record.outcome = StepOutcome.FAILED
            record.error = f"{type(e).__name__}: {e}"
            record.return_code = 1
            self.reporter.error(f"{step.name}: {e}")
        record.duration_ms = int((time.monotonic() - start) * 1000)

        if record.outcome is StepOutcome.SUCCEEDED:
            self.reporter.info(f"{prefix}: {step.description} done.")
        return record
