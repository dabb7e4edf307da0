"""
Docker adapter — image builds and foreground runs.

Uses the docker CLI. A build context may be a local directory or a
remote git reference (``https://...git#branch``); docker resolves both.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from hyperon_provision.adapters.base import ContainerBuilder
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext

logger = logging.getLogger(__name__)


class DockerAdapter(ContainerBuilder):
    """Container images via ``docker build`` / ``docker run``."""

    executable = "docker"

    @property
    def name(self) -> str:
        return "docker"

    def build(
        self,
        ctx: WorkspaceContext,
        build_context: str,
        tag: str,
        *,
        cwd: Path | None = None,
        target: str | None = None,
        build_args: Mapping[str, str] | None = None,
    ) -> None:
        cmd = ["docker", "build"]
        for key, value in (build_args or {}).items():
            cmd.extend(["--build-arg", f"{key}={value}"])
        if target:
            cmd.extend(["--target", target])
        cmd.extend(["-t", tag, build_context])
        logger.debug("docker build %s → %s", build_context, tag)
        run_command(cmd, cwd=cwd or ctx.root, env=ctx.env)

    def run(self, ctx: WorkspaceContext, image: str, *, interactive: bool = True) -> None:
        cmd = ["docker", "run"]
        if interactive:
            cmd.append("-ti")
        cmd.append(image)
        run_command(cmd, cwd=ctx.root, env=ctx.env)
