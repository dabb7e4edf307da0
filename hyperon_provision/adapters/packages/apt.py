"""
APT adapter — Debian/Ubuntu system packages.

Both operations need root and are prefixed with sudo when the
current user is not root.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from hyperon_provision.adapters.base import PackageManager
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext

logger = logging.getLogger(__name__)


class AptPackageManager(PackageManager):
    """System packages via ``apt-get``."""

    executable = "apt-get"

    @property
    def name(self) -> str:
        return "apt"

    def refresh(self, ctx: WorkspaceContext) -> None:
        run_command(["apt-get", "update"], env=ctx.env, needs_sudo=True)

    def install(
        self,
        ctx: WorkspaceContext,
        packages: Sequence[str],
        *,
        upgrade: bool = False,
    ) -> None:
        if not packages:
            return
        cmd = ["apt-get", "install", "-y"]
        if upgrade:
            cmd.append("--only-upgrade")
        logger.debug("apt-get install: %s", ", ".join(packages))
        run_command([*cmd, *packages], env=ctx.env, needs_sudo=True)
