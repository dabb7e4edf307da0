"""
Shell command runner — the single place where external tools are spawned.

Every adapter funnels its invocations through ``run_command``. A non-zero
exit is never swallowed: it is raised as ``ToolInvocationError`` carrying
the tool's exit status, so the orchestrator can abort the run and surface
that status as the process exit code.

Tool output streams straight to the operator's terminal unless the caller
asks for it to be captured. There is deliberately no timeout: builds and
package installs block until they finish.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from hyperon_provision.adapters.base import CommandRunner
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.errors import ProvisionError

logger = logging.getLogger(__name__)

# Exit status reported when the executable itself cannot be found
COMMAND_NOT_FOUND = 127


class ToolInvocationError(ProvisionError):
    """An external tool exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        return_code: int,
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.return_code = return_code
        self.exit_code = return_code if return_code > 0 else 1
        self.stderr = stderr
        message = f"`{shlex.join(self.command)}` exited with status {return_code}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


@dataclass
class CommandResult:
    """Outcome of a successful invocation."""

    command: list[str]
    return_code: int = 0
    stdout: str = ""
    elapsed_ms: int = 0


def sudo_prefix(cmd: Sequence[str], needs_sudo: bool) -> list[str]:
    """Prefix ``cmd`` with sudo unless we already run as root."""
    if needs_sudo and os.geteuid() != 0:
        return ["sudo", *cmd]
    return list(cmd)


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    needs_sudo: bool = False,
    capture: bool = False,
) -> CommandResult:
    """Run ``cmd`` to completion and raise on failure.

    Args:
        cmd: Argument vector; never passed through a shell.
        cwd: Working directory for the tool.
        env: Full environment for the child. The executable is resolved
            against this environment's ``PATH``.
        needs_sudo: Prefix with ``sudo`` when not running as root.
        capture: Capture stdout/stderr instead of streaming them.

    Returns:
        ``CommandResult`` for a zero exit.

    Raises:
        ToolInvocationError: The tool was missing or exited non-zero.
    """
    argv = sudo_prefix(cmd, needs_sudo)
    logger.debug("Executing: %s (cwd=%s)", shlex.join(argv), cwd)
    start = time.monotonic()

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            capture_output=capture,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolInvocationError(argv, COMMAND_NOT_FOUND, str(e)) from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if result.returncode != 0:
        stderr = (result.stderr or "").strip()[-2000:] if capture else ""
        logger.debug("Command failed after %dms: %s", elapsed_ms, shlex.join(argv))
        raise ToolInvocationError(argv, result.returncode, stderr)

    return CommandResult(
        command=argv,
        return_code=result.returncode,
        stdout=(result.stdout or "") if capture else "",
        elapsed_ms=elapsed_ms,
    )


class ShellCommandAdapter(CommandRunner):
    """Run arbitrary commands through ``run_command``."""

    executable = "sh"

    @property
    def name(self) -> str:
        return "shell"

    def run(
        self,
        ctx: WorkspaceContext,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        needs_sudo: bool = False,
    ) -> None:
        run_command(cmd, cwd=cwd or ctx.root, env=ctx.env, needs_sudo=needs_sudo)
