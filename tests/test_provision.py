"""
Tests for the provision use case — planning, running, and the ledger.
"""

from hyperon_provision.adapters.registry import build_toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.step import StepOutcome
from hyperon_provision.core.models.strategy import ContainerSession, StagedContainerBuild
from hyperon_provision.core.persistence.audit import AuditWriter
from hyperon_provision.core.services.steps import STEP_ORDER
from hyperon_provision.core.use_cases.provision import (
    USAGE_ERROR,
    plan_provision,
    run_provision,
)


def _run(config, ctx, tools, reporter, **kwargs):
    return run_provision(config, context=ctx, tools=tools, reporter=reporter, **kwargs)


class TestPlan:
    def test_defaults(self, config, tools, reporter):
        plan = plan_provision(config, tools, reporter)
        assert plan.strategy.kind == "native"
        assert plan.session is None
        assert [s.name for s in plan.steps] == list(STEP_ORDER[:-1])

    def test_choices(self, config, tools, reporter):
        plan = plan_provision(
            config,
            tools,
            reporter,
            strategy_kind="staged-container",
            session_mode="container",
            run_tests=False,
        )
        assert isinstance(plan.strategy, StagedContainerBuild)
        assert isinstance(plan.session, ContainerSession)
        assert "python-tests" not in [s.name for s in plan.steps]
        assert plan.steps[-1].name == "session"

    def test_config_disables_tests(self, config, tools, reporter):
        config.python.run_tests = False
        plan = plan_provision(config, tools, reporter)
        assert "python-tests" not in [s.name for s in plan.steps]


class TestRunProvision:
    def test_full_run(self, config, ctx, tools, reporter, doc_manifest):
        tools.git.upstream_manifest = doc_manifest
        result = _run(config, ctx, tools, reporter)

        assert result.exit_code == 0
        assert result.report.ok
        assert [r.step for r in result.report.records] == list(STEP_ORDER[:-1])
        assert "doc" not in ctx.manifest_path.read_text()

    def test_ledger_written(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, only="sync-repo", operation_type="sync")

        entries = AuditWriter(workspace=ctx.root).read_all()
        assert len(entries) == 1
        assert entries[0].operation_type == "sync"
        assert entries[0].operation_id == result.report.operation_id
        assert entries[0].mock is True
        assert entries[0].steps_total == 1

    def test_failed_run_still_audited(self, config, ctx, tools, reporter):
        tools.pip.set_failure("install", return_code=9)
        result = _run(config, ctx, tools, reporter)

        assert result.exit_code == 9
        assert result.report.failed_step.step == "conan"
        entry = AuditWriter(workspace=ctx.root).read_all()[0]
        assert entry.status == "failed"
        assert entry.failed_step == "conan"

    def test_no_audit(self, config, ctx, tools, reporter):
        _run(config, ctx, tools, reporter, only="gtk3", audit=False)
        assert AuditWriter(workspace=ctx.root).read_all() == []

    def test_resume_from_step(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, start_from="metta-pypi", run_tests=False)
        assert [r.step for r in result.report.records] == [
            "metta-pypi",
            "sync-repo",
            "build",
            "python-module",
        ]
        assert tools.apt.calls == []

    def test_unknown_step_is_usage_error(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, only="nope")
        assert result.exit_code == USAGE_ERROR
        assert result.report is None
        assert "Unknown step 'nope'" in reporter.errors[0]
        assert AuditWriter(workspace=ctx.root).read_all() == []

    def test_invalid_strategy_is_usage_error(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, strategy_kind="podman")
        assert result.exit_code == USAGE_ERROR
        assert "podman" in result.to_dict()["error"]

    def test_session_only(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, only="session", session_mode="repl")
        assert result.report.session == "repl"
        assert tools.shell.commands == [
            ["cargo", "run", "--features", "python", "--bin", "metta-repl"],
        ]


class TestToolchainFromEarlierRun:
    """A toolchain left in ~/.cargo/bin by a previous process counts as installed."""

    def _outcomes(self, result):
        return {r.step: r.outcome for r in result.report.records}

    def test_resume_from_cbindgen(self, config, ctx, tools, reporter, cargo_toolchain):
        result = _run(config, ctx, tools, reporter, start_from="cbindgen", run_tests=False)

        assert result.exit_code == 0
        assert self._outcomes(result)["cbindgen"] is StepOutcome.SKIPPED
        assert tools.cargo.calls == []
        assert ctx.env["PATH"].split(":")[0] == str(cargo_toolchain)

    def test_single_cbindgen_step(self, config, ctx, tools, reporter, cargo_toolchain):
        result = _run(config, ctx, tools, reporter, only="cbindgen")

        assert [r.step for r in result.report.records] == ["cbindgen"]
        assert result.report.records[0].outcome is StepOutcome.SKIPPED
        assert tools.cargo.calls == []

    def test_rerun_skips_rust_install(self, config, ctx, bin_dir, reporter, cargo_toolchain):
        first = build_toolbox(mock_mode=True)
        assert _run(config, ctx, first, reporter).exit_code == 0

        fresh = WorkspaceContext(
            root=ctx.root,
            home=ctx.home,
            env={"PATH": str(bin_dir), "HOME": str(ctx.home)},
        )
        second = build_toolbox(mock_mode=True)
        result = _run(config, fresh, second, reporter)

        outcomes = self._outcomes(result)
        assert outcomes["rust-toolchain"] is StepOutcome.SKIPPED
        assert outcomes["cbindgen"] is StepOutcome.SKIPPED
        assert not any(cmd[0] == "curl" for cmd in second.shell.commands)
        assert second.cargo.calls == []

    def test_without_toolchain_installs(self, config, ctx, tools, reporter):
        result = _run(config, ctx, tools, reporter, only="cbindgen")

        assert result.report.records[0].outcome is StepOutcome.SUCCEEDED
        assert tools.cargo.installed == ["cbindgen"]
