"""
Provision use case — wire config, tools, and steps, then run them.

This is the vertical slice behind every CLI command: build the
workspace context, resolve the chosen build strategy and runtime
session, lay out the step sequence, run it (fully, from a step, or a
single step), and append the outcome to the ledger.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from hyperon_provision.adapters.registry import Toolbox, build_toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.engine.orchestrator import (
    Orchestrator,
    UnknownStepError,
    generate_operation_id,
)
from hyperon_provision.core.models.config import ProvisionConfig
from hyperon_provision.core.models.step import InstallationReport, Step
from hyperon_provision.core.models.strategy import BuildStrategy, RuntimeSession
from hyperon_provision.core.observability.reporting import Reporter
from hyperon_provision.core.persistence.audit import AuditEntry, AuditWriter
from hyperon_provision.core.services.build_strategy import select_strategy
from hyperon_provision.core.services.runtime_session import select_session
from hyperon_provision.core.services.steps import StepLibrary

logger = logging.getLogger(__name__)

# Exit status for invalid selections (unknown step, strategy, or session)
USAGE_ERROR = 2


@dataclass
class ProvisionPlan:
    """The resolved sequence for one invocation."""

    steps: list[Step] = field(default_factory=list)
    strategy: BuildStrategy | None = None
    session: RuntimeSession | None = None


@dataclass
class ProvisionResult:
    """Result of a provisioning invocation."""

    report: InstallationReport | None = None
    plan: ProvisionPlan | None = None
    workspace: Path | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error:
            return USAGE_ERROR
        return self.report.exit_code if self.report else 0

    def to_dict(self) -> dict:
        result: dict = {"workspace": str(self.workspace) if self.workspace else None}
        if self.error:
            result["error"] = self.error
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def build_context(config: ProvisionConfig, workspace: Path | None = None) -> WorkspaceContext:
    """Workspace context from the process environment."""
    return WorkspaceContext.from_environment(
        root=workspace,
        repo_dir=config.repository.directory,
    )


def plan_provision(
    config: ProvisionConfig,
    tools: Toolbox,
    reporter: Reporter,
    *,
    strategy_kind: str | None = None,
    session_mode: str | None = None,
    script: str | None = None,
    run_tests: bool | None = None,
) -> ProvisionPlan:
    """Resolve strategy, session, and the ordered step list.

    Raises:
        ValueError: Unknown strategy or session mode.
    """
    strategy = select_strategy(strategy_kind, config.build)
    session = select_session(session_mode, config.session, script)
    if run_tests is None:
        run_tests = config.python.run_tests

    library = StepLibrary(tools, config, reporter)
    steps = library.sequence(strategy, session, run_tests=run_tests)
    return ProvisionPlan(steps=steps, strategy=strategy, session=session)


def run_provision(
    config: ProvisionConfig,
    *,
    workspace: Path | None = None,
    reporter: Reporter | None = None,
    tools: Toolbox | None = None,
    mock_mode: bool = False,
    context: WorkspaceContext | None = None,
    strategy_kind: str | None = None,
    session_mode: str | None = None,
    script: str | None = None,
    run_tests: bool | None = None,
    start_from: str | None = None,
    only: str | None = None,
    operation_type: str = "run",
    audit: bool = True,
) -> ProvisionResult:
    """Provision the workspace.

    Args:
        config: Validated configuration.
        workspace: Directory holding the clone (default: cwd).
        reporter: Operator-facing messages (default: console).
        tools: Pre-built toolbox (default: real tools, or fakes in mock mode).
        mock_mode: Simulate external tools.
        context: Pre-built workspace context (tests).
        strategy_kind: Build strategy (default: ``config.build.strategy``).
        session_mode: Runtime session (default: ``config.session.mode``).
        script: Script name for a script session.
        run_tests: Include the Python test step (default: config).
        start_from: Resume the sequence at this step.
        only: Run exactly this step.
        operation_type: Label for the ledger entry.
        audit: Append the outcome to the ledger.
    """
    reporter = reporter or Reporter()
    ctx = context or build_context(config, workspace)
    # A toolchain installed by an earlier process is not on the inherited PATH
    ctx.load_toolchain_env()
    result = ProvisionResult(workspace=ctx.root)

    if tools is None:
        tools = build_toolbox(python=config.toolchain.python, mock_mode=mock_mode)

    try:
        plan = plan_provision(
            config,
            tools,
            reporter,
            strategy_kind=strategy_kind,
            session_mode=session_mode,
            script=script,
            run_tests=run_tests,
        )
        orchestrator = Orchestrator(plan.steps, reporter)
        orchestrator.select(start_from=start_from, only=only)
    except (ValueError, UnknownStepError) as e:
        result.error = str(e)
        reporter.error(str(e))
        return result
    result.plan = plan

    report = InstallationReport(
        operation_id=generate_operation_id(),
        strategy=plan.strategy.kind if plan.strategy else None,
        session=plan.session.kind if plan.session else None,
    )
    start = time.monotonic()
    orchestrator.run(ctx, start_from=start_from, only=only, report=report)
    duration_ms = int((time.monotonic() - start) * 1000)
    result.report = report

    logger.info(
        "Operation %s finished: %s (%d succeeded, %d skipped, %d failed)",
        report.operation_id,
        report.status,
        report.succeeded,
        report.skipped,
        report.failed,
    )

    if audit:
        AuditWriter(workspace=ctx.root).write(
            AuditEntry.from_report(
                report,
                operation_type,
                duration_ms=duration_ms,
                mock=tools.mock_mode,
            )
        )

    return result
