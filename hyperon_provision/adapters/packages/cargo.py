"""
Cargo adapter — Rust binaries via ``cargo install``.

Only usable once the Rust toolchain is installed and its environment
loaded into the workspace context.
"""

from __future__ import annotations

from collections.abc import Sequence

from hyperon_provision.adapters.base import PackageManager
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext


class CargoPackageManager(PackageManager):
    """Rust crates with binaries via ``cargo install --force``."""

    executable = "cargo"

    @property
    def name(self) -> str:
        return "cargo"

    def install(
        self,
        ctx: WorkspaceContext,
        packages: Sequence[str],
        *,
        upgrade: bool = False,
    ) -> None:
        # --force reinstalls, so upgrade needs no separate flag
        if not packages:
            return
        run_command(["cargo", "install", "--force", *packages], cwd=ctx.root, env=ctx.env)
