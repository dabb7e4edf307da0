"""
CMake adapter — configure, build, and install out-of-source trees.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from hyperon_provision.adapters.base import NativeBuildSystem
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext


class CMakeAdapter(NativeBuildSystem):
    """Native builds via ``cmake``."""

    executable = "cmake"

    @property
    def name(self) -> str:
        return "cmake"

    def configure(
        self,
        ctx: WorkspaceContext,
        source_dir: Path,
        build_dir: Path,
        defines: Mapping[str, str] | None = None,
    ) -> None:
        cmd = ["cmake", *(f"-D{k}={v}" for k, v in (defines or {}).items())]
        cmd.extend(["-S", str(source_dir), "-B", str(build_dir)])
        run_command(cmd, cwd=build_dir, env=ctx.env)

    def build(
        self,
        ctx: WorkspaceContext,
        build_dir: Path,
        *,
        target: str | None = None,
        jobs: int | None = None,
    ) -> None:
        cmd = ["cmake", "--build", str(build_dir)]
        if target:
            cmd.extend(["--target", target])
        if jobs:
            cmd.extend(["--parallel", str(jobs)])
        run_command(cmd, cwd=build_dir, env=ctx.env)

    def install(self, ctx: WorkspaceContext, build_dir: Path, *, sudo: bool = True) -> None:
        run_command(["cmake", "--install", str(build_dir)], cwd=build_dir, env=ctx.env, needs_sudo=sudo)
