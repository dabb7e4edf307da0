"""
Git adapter — working-copy operations for the repository synchronizer.

Uses the git CLI. Network errors and merge conflicts are not handled
here: git's own exit status and message propagate unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hyperon_provision.adapters.base import VersionControlClient
from hyperon_provision.adapters.shell.command import run_command
from hyperon_provision.core.context import WorkspaceContext

logger = logging.getLogger(__name__)


class GitAdapter(VersionControlClient):
    """Version control through the ``git`` CLI."""

    executable = "git"

    @property
    def name(self) -> str:
        return "git"

    def clone(self, ctx: WorkspaceContext, url: str, dest: Path) -> None:
        self._git(ctx, ["clone", url, str(dest)], cwd=ctx.root)

    def pull(self, ctx: WorkspaceContext, repo: Path) -> None:
        self._git(ctx, ["pull"], cwd=repo)

    def checkout(self, ctx: WorkspaceContext, repo: Path, ref: str) -> None:
        self._git(ctx, ["checkout", ref], cwd=repo)

    def update_submodules(self, ctx: WorkspaceContext, repo: Path) -> None:
        self._git(ctx, ["submodule", "update", "--init", "--recursive"], cwd=repo)

    def deinit_submodule(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        self._git(ctx, ["submodule", "deinit", "-f", "--", path], cwd=repo)

    def remove_path(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        self._git(ctx, ["rm", "-f", "--ignore-unmatch", "--", path], cwd=repo)

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, ctx: WorkspaceContext, args: list[str], cwd: Path) -> None:
        logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
        run_command(["git", *args], cwd=cwd, env=ctx.env)
