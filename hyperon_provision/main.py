"""
Hyperon Provision — CLI entrypoint.

Usage:
    hyperon-provision --help
    hyperon-provision run
    hyperon-provision run --strategy local-container --session container
    hyperon-provision --mock run
    hyperon-provision step google-benchmark
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from hyperon_provision import __version__
from hyperon_provision.core.observability.logging_config import (
    resolve_level,
    setup_from_environment,
)

COMPLETION_MESSAGE = "OpenCog Hyperon setup and installation completed successfully."


@click.group()
@click.version_option(version=__version__, prog_name="hyperon-provision")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to provision.yml (default: auto-detect).",
)
@click.option(
    "--workspace",
    "-w",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory that holds the clone (default: current directory).",
)
@click.option("--mock", is_flag=True, help="Simulate every external tool.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    workspace: str | None,
    mock: bool,
) -> None:
    """Provision an OpenCog Hyperon development environment."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["workspace"] = Path(workspace).resolve() if workspace else None
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_environment(
        resolve_level(verbose=verbose, quiet=quiet, debug=debug),
        quiet_third_party=not debug,
    )


# ── Helpers ─────────────────────────────────────────────────────


def _fail(message: str, code: int = 1) -> None:
    click.secho("[ERROR]", fg="red", nl=False, err=True)
    click.echo(f" {message}", err=True)
    sys.exit(code)


def _load(ctx: click.Context):
    """Load provision.yml, exiting with status 1 when it is invalid."""
    from hyperon_provision.core.config.loader import ConfigError, find_config_file, load_config

    path = ctx.obj.get("config_path")
    workspace = ctx.obj.get("workspace")
    try:
        if path is None and workspace is not None:
            return load_config(find_config_file(workspace), search=False)
        return load_config(path)
    except ConfigError as e:
        _fail(str(e))


def _reporter(ctx: click.Context):
    from hyperon_provision.core.observability.reporting import Reporter

    return Reporter(quiet=ctx.obj.get("quiet", False))


def _provision(ctx: click.Context, operation_type: str, **options):
    """Run (part of) the sequence and exit with its status on failure."""
    from hyperon_provision.core.use_cases.provision import run_provision

    config = _load(ctx)
    reporter = _reporter(ctx)
    result = run_provision(
        config,
        workspace=ctx.obj.get("workspace"),
        reporter=reporter,
        mock_mode=ctx.obj.get("mock", False),
        operation_type=operation_type,
        **options,
    )
    if result.exit_code:
        sys.exit(result.exit_code)
    return reporter


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.option("--strategy", default=None, help="Build strategy (default: from config).")
@click.option("--session", "session_mode", default=None, help="Runtime session to start at the end.")
@click.option("--script", default=None, help="MeTTa script name for a script session.")
@click.option("--from", "start_from", default=None, help="Resume the sequence at this step.")
@click.option("--skip-tests", is_flag=True, help="Skip the Python unit tests.")
@click.pass_context
def run(
    ctx: click.Context,
    strategy: str | None,
    session_mode: str | None,
    script: str | None,
    start_from: str | None,
    skip_tests: bool,
) -> None:
    """Run the full provisioning sequence."""
    reporter = _provision(
        ctx,
        "run",
        strategy_kind=strategy,
        session_mode=session_mode,
        script=script,
        start_from=start_from,
        run_tests=False if skip_tests else None,
    )
    reporter.info(COMPLETION_MESSAGE)


@cli.command()
@click.argument("name")
@click.option("--strategy", default=None, help="Build strategy for the build step.")
@click.option("--session", "session_mode", default=None, help="Runtime session for the session step.")
@click.option("--script", default=None, help="MeTTa script name for a script session.")
@click.pass_context
def step(
    ctx: click.Context,
    name: str,
    strategy: str | None,
    session_mode: str | None,
    script: str | None,
) -> None:
    """Run a single named step."""
    _provision(
        ctx,
        "step",
        only=name,
        strategy_kind=strategy,
        session_mode=session_mode,
        script=script,
        run_tests=True,
    )


@cli.command()
@click.pass_context
def sync(ctx: click.Context) -> None:
    """Clone or update the repository and drop the protected submodule."""
    _provision(ctx, "sync", only="sync-repo")


@cli.command()
@click.option("--strategy", default=None, help="Build strategy (default: from config).")
@click.pass_context
def build(ctx: click.Context, strategy: str | None) -> None:
    """Build with one strategy."""
    _provision(ctx, "build", only="build", strategy_kind=strategy)


@cli.command()
@click.option("--mode", required=True, help="script, repl, or container.")
@click.option("--script", default=None, help="MeTTa script name for a script session.")
@click.pass_context
def session(ctx: click.Context, mode: str, script: str | None) -> None:
    """Start one MeTTa runtime session."""
    _provision(ctx, "session", only="session", session_mode=mode, script=script)


@cli.command("steps")
@click.option("--strategy", default=None, help="Build strategy to list.")
@click.option("--session", "session_mode", default=None, help="Include a runtime session.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_steps(
    ctx: click.Context,
    strategy: str | None,
    session_mode: str | None,
    as_json: bool,
) -> None:
    """List the provisioning order."""
    from hyperon_provision.adapters.registry import build_toolbox
    from hyperon_provision.core.observability.reporting import RecordingReporter
    from hyperon_provision.core.use_cases.provision import build_context, plan_provision

    config = _load(ctx)
    try:
        plan = plan_provision(
            config,
            build_toolbox(python=config.toolchain.python, mock_mode=True),
            RecordingReporter(),
            strategy_kind=strategy,
            session_mode=session_mode,
        )
    except ValueError as e:
        _fail(str(e), 2)
    env = build_context(config, ctx.obj.get("workspace"))
    env.load_toolchain_env()

    rows = []
    for s in plan.steps:
        rows.append({
            "name": s.name,
            "description": s.description,
            "idempotent": s.idempotent,
            "satisfied": s.is_satisfied(env) if s.idempotent else None,
        })

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    for index, row in enumerate(rows, start=1):
        click.echo(f"  {index:2d}. {row['name']:<18} {row['description']}", nl=False)
        if row["idempotent"]:
            marker, color = ("present", "green") if row["satisfied"] else ("missing", "yellow")
            click.echo("  ", nl=False)
            click.secho(f"[idempotent: {marker}]", fg=color)
        else:
            click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe(ctx: click.Context, as_json: bool) -> None:
    """Report which tools, libraries, and submodules are already present."""
    from hyperon_provision.core.errors import ProvisionError
    from hyperon_provision.core.use_cases.probe import probe_environment
    from hyperon_provision.core.use_cases.provision import build_context

    config = _load(ctx)
    try:
        result = probe_environment(config, build_context(config, ctx.obj.get("workspace")))
    except ProvisionError as e:
        _fail(str(e), e.exit_code)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"\nWorkspace: {result.workspace}", fg="cyan", bold=True)
    click.secho("   Commands:", bold=True)
    for name, found in result.commands.items():
        icon = "✓" if found else "✗"
        click.secho(f"     {icon} {name}", fg="green" if found else "red")
    bench = "installed" if result.benchmark_installed else "not installed"
    click.echo(f"   Google Benchmark: {bench}")
    if result.repository_present:
        subs = ", ".join(result.submodules) or "none"
        click.echo(f"   Repository: present (submodules: {subs})")
        if result.excluded_present:
            click.secho(f"   '{result.excluded_path}' is still declared; run `sync`.", fg="yellow")
    else:
        click.echo("   Repository: not cloned")
    click.echo()


@cli.command()
@click.option("-n", "count", default=10, show_default=True, help="Entries to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent provisioning runs from the audit ledger."""
    from hyperon_provision.core.persistence.audit import AuditWriter

    workspace = ctx.obj.get("workspace") or Path.cwd()
    entries = AuditWriter(workspace=workspace).read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump() for e in entries], indent=2))
        return

    if not entries:
        click.echo("No provisioning runs recorded.")
        return

    for entry in entries:
        color = "green" if entry.status == "ok" else "red"
        click.echo(f"  {entry.timestamp}  {entry.operation_type:<8} ", nl=False)
        click.secho(f"{entry.status:<7}", fg=color, nl=False)
        detail = f" failed at {entry.failed_step}" if entry.failed_step else ""
        mock = " (mock)" if entry.mock else ""
        click.echo(
            f" {entry.steps_succeeded} ok, {entry.steps_skipped} skipped{detail}{mock}"
        )


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
