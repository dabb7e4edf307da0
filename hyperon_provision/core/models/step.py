"""
Step and report models — what runs, and what happened.

A ``Step`` is a named provisioning action with an optional
precondition. ``StepRecord`` / ``InstallationReport`` capture outcomes
for logging and the audit ledger; the orchestrator only ever branches
on the failure of the step it just ran.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from hyperon_provision.core.context import WorkspaceContext

StepAction = Callable[[WorkspaceContext], None]
StepCheck = Callable[[WorkspaceContext], bool]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class Step:
    """One entry of the provisioning sequence.

    ``precondition`` is consulted only for idempotent steps: when it
    returns True the action is skipped. It exists to avoid redundant
    work, never for correctness.
    """

    name: str
    description: str
    action: StepAction
    precondition: StepCheck | None = None
    idempotent: bool = False

    def is_satisfied(self, ctx: WorkspaceContext) -> bool:
        """Whether the action can be skipped."""
        if not self.idempotent or self.precondition is None:
            return False
        return bool(self.precondition(ctx))


class StepOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class StepRecord(BaseModel):
    """Outcome of a single step."""

    step: str
    outcome: StepOutcome
    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0
    error: str | None = None
    return_code: int | None = None


class InstallationReport(BaseModel):
    """Ordered step outcomes of one orchestrator run."""

    operation_id: str = ""
    strategy: str | None = None
    session: str | None = None
    records: list[StepRecord] = Field(default_factory=list)

    def add(self, record: StepRecord) -> None:
        self.records.append(record)

    def _count(self, outcome: StepOutcome) -> int:
        return sum(1 for r in self.records if r.outcome is outcome)

    @property
    def succeeded(self) -> int:
        return self._count(StepOutcome.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self._count(StepOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(StepOutcome.FAILED)

    @property
    def failed_step(self) -> StepRecord | None:
        for record in self.records:
            if record.outcome is StepOutcome.FAILED:
                return record
        return None

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def exit_code(self) -> int:
        """0 on success, otherwise the failing tool's exit status."""
        failed = self.failed_step
        if failed is None:
            return 0
        return failed.return_code or 1

    @property
    def status(self) -> str:
        return "ok" if self.ok else "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "strategy": self.strategy,
            "session": self.session,
            "status": self.status,
            "exit_code": self.exit_code,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "steps": [r.model_dump(mode="json") for r in self.records],
        }
