"""
pip adapter — Python packages through ``<python> -m pip``.

Also covers editable installs of a local project, which the Python
dev-install step uses for the synchronized repository.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from hyperon_provision.adapters.base import PythonPackageManager
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext


class PipPackageManager(PythonPackageManager):
    """Python packages via ``python -m pip``."""

    def __init__(self, python: str = "python3"):
        self.executable = python

    @property
    def name(self) -> str:
        return "pip"

    def _pip(self) -> list[str]:
        return [self.executable, "-m", "pip"]

    def install(
        self,
        ctx: WorkspaceContext,
        packages: Sequence[str],
        *,
        upgrade: bool = False,
    ) -> None:
        if not packages:
            return
        cmd = [*self._pip(), "install"]
        if upgrade:
            cmd.append("--upgrade")
        run_command([*cmd, *packages], cwd=ctx.root, env=ctx.env)

    def install_editable(
        self,
        ctx: WorkspaceContext,
        project_dir: Path,
        extras: Sequence[str] = (),
    ) -> None:
        """``pip install -e ./[extras]`` run inside ``project_dir``."""
        target = "./"
        if extras:
            target = f"./[{','.join(extras)}]"
        run_command([*self._pip(), "install", "-e", target], cwd=project_dir, env=ctx.env)
