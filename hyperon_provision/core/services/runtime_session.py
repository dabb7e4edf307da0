"""
Runtime sessions — ways to actually run MeTTa once things are built.

Like build strategies these are alternatives chosen by the caller;
a run uses at most one. Each maps to a single foreground invocation.
"""

from __future__ import annotations

from hyperon_provision.adapters.registry import Toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.config import SessionConfig
from hyperon_provision.core.models.strategy import (
    SESSION_KINDS,
    ContainerSession,
    ReplSession,
    RuntimeSession,
    ScriptSession,
)
from hyperon_provision.core.observability.reporting import Reporter


def select_session(
    mode: str | None,
    config: SessionConfig,
    script: str | None = None,
) -> RuntimeSession | None:
    """Build the session variant for ``mode`` (default: ``config.mode``).

    Returns None when no session is wanted.

    Raises:
        ValueError: Unknown mode, or a script session without a script.
    """
    mode = mode or config.mode
    if mode is None:
        return None
    if mode == "script":
        script = script or config.script
        if not script:
            raise ValueError("A script session needs a script name (--script)")
        return ScriptSession(
            script=script,
            scripts_dir=config.scripts_dir,
            runner=config.script_runner,
        )
    if mode == "repl":
        return ReplSession(features=list(config.repl_features), binary=config.repl_binary)
    if mode == "container":
        return ContainerSession(image=config.image, tag=config.tag)
    raise ValueError(f"Unknown session mode '{mode}'. Valid: {', '.join(SESSION_KINDS)}")


def _script_filename(name: str) -> str:
    return name if name.endswith(".metta") else f"{name}.metta"


def execute_session(
    session: RuntimeSession,
    ctx: WorkspaceContext,
    tools: Toolbox,
    reporter: Reporter,
) -> None:
    if isinstance(session, ScriptSession):
        script = ctx.repo_path / session.scripts_dir / _script_filename(session.script)
        reporter.info(f"Running MeTTa script: {script.name}...")
        tools.shell.run(ctx, [session.runner, str(script)])
        reporter.info("MeTTa script executed successfully.")
    elif isinstance(session, ReplSession):
        reporter.info("Running REPL with Python support...")
        cmd = ["cargo", "run"]
        if session.features:
            cmd.extend(["--features", ",".join(session.features)])
        cmd.extend(["--bin", session.binary])
        tools.shell.run(ctx, cmd, cwd=ctx.repo_path)
        reporter.info("REPL session finished.")
    else:
        reporter.info(f"Pulling and running MeTTa Docker image {session.reference}...")
        tools.docker.run(ctx, session.reference, interactive=True)
        reporter.info("MeTTa Docker container exited.")
