"""
Repository synchronizer — clone or update, then enforce the exclusion.

Brings the local working copy to the latest upstream state with all
nested submodules initialized, then guarantees that one protected path
is absent from both the working tree and ``.gitmodules``.

The exclusion runs after every synchronization, on both the clone and
the update path, because a pull can reintroduce the submodule from
upstream. When the manifest does not declare the protected path the
pass is a reported no-op.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from hyperon_provision.adapters.base import VersionControlClient
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.repository import RepositoryState
from hyperon_provision.core.observability.reporting import Reporter
from hyperon_provision.core.services.gitmodules import SubmoduleManifest, normalize_path

logger = logging.getLogger(__name__)


def _remove_tree(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


class RepositorySynchronizer:
    """Keeps ``ctx.repo_path`` in sync with ``remote_url``, minus ``excluded_path``."""

    def __init__(
        self,
        vcs: VersionControlClient,
        reporter: Reporter,
        remote_url: str,
        excluded_path: str,
    ):
        self.vcs = vcs
        self.reporter = reporter
        self.remote_url = remote_url
        self.excluded_path = normalize_path(excluded_path)

    def synchronize(self, ctx: WorkspaceContext) -> RepositoryState:
        """Clone or pull, update submodules, enforce the exclusion."""
        repo = ctx.repo_path
        label = ctx.repo_dir

        if repo.exists():
            self.reporter.info(f"{label} repository already exists. Updating...")
            self.vcs.pull(ctx, repo)
            self.vcs.update_submodules(ctx, repo)
            self.enforce_exclusion(ctx)
        else:
            self.reporter.info(f"Cloning {self.remote_url} into {label}...")
            self.vcs.clone(ctx, self.remote_url, repo)
            self.vcs.update_submodules(ctx, repo)
            self.enforce_exclusion(ctx)
            self.reporter.info(f"{label} repository cloned successfully.")

        return self.state(ctx)

    def enforce_exclusion(self, ctx: WorkspaceContext) -> bool:
        """Remove the protected submodule if the manifest declares it.

        Returns:
            True if something was removed, False for the no-op case.

        Raises:
            ManifestError: ``.gitmodules`` is malformed or unwritable.
            ToolInvocationError: a git command failed.
        """
        repo = ctx.repo_path
        manifest_path = ctx.manifest_path
        name = self.excluded_path

        section = None
        if manifest_path.is_file():
            section = SubmoduleManifest.load(manifest_path).find(name)

        if section is None:
            self.reporter.info(f"'{name}' submodule does not exist. No action needed.")
            return False

        self.reporter.info(f"Removing '{name}' submodule as it is a protected path...")
        sub_path = section.path

        self.vcs.deinit_submodule(ctx, repo, sub_path)
        self.vcs.remove_path(ctx, repo, sub_path)
        _remove_tree(repo / sub_path)

        modules_dir = repo / ".git" / "modules" / section.name
        if modules_dir.exists():
            logger.debug("Purging submodule metadata %s", modules_dir)
            _remove_tree(modules_dir)

        # git rm may already have dropped the section
        if manifest_path.is_file():
            manifest = SubmoduleManifest.load(manifest_path)
            if manifest.remove(name):
                manifest.save(manifest_path)
                logger.debug("Dropped '%s' from %s", name, manifest_path)

        self.reporter.info(f"'{name}' submodule removed successfully.")
        return True

    def state(self, ctx: WorkspaceContext) -> RepositoryState:
        """Observe the working copy as it is now."""
        paths: set[str] = set()
        if ctx.manifest_path.is_file():
            paths = SubmoduleManifest.load(ctx.manifest_path).paths
        return RepositoryState(
            local_path=ctx.repo_path,
            remote_url=self.remote_url,
            submodule_paths=paths,
            excluded_path=self.excluded_path,
        )
