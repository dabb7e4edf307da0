"""
Adapter base — the capability contracts between steps and external tools.

Steps never spawn processes themselves. They talk to a small set of
capability interfaces, each backed by one external tool:

    PackageManager        apt-get, cargo
    PythonPackageManager  pip (adds editable installs)
    VersionControlClient  git
    ContainerBuilder      docker
    NativeBuildSystem     cmake
    CommandRunner         anything else (installers, test runners, REPLs)

Every operation takes the ``WorkspaceContext`` so that child processes
inherit the loaded toolchain environment. Failures propagate as
``ToolInvocationError`` — adapters do not catch or wrap them.

The recording fakes in ``hyperon_provision.adapters.mock`` implement the
same interfaces for tests and ``--mock`` runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path

from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.services.probe import command_exists


class ToolAdapter(ABC):
    """Common surface: a name and an availability probe."""

    #: Executable probed by ``is_available``.
    executable: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'apt', 'git', 'docker')."""

    def is_available(self, ctx: WorkspaceContext | None = None) -> bool:
        """Check if the underlying tool is on the search path."""
        return command_exists(self.executable, ctx.env if ctx else None)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class PackageManager(ToolAdapter):
    """Installs named packages from some index."""

    def refresh(self, ctx: WorkspaceContext) -> None:
        """Refresh the package index. Index-less managers do nothing."""

    @abstractmethod
    def install(
        self,
        ctx: WorkspaceContext,
        packages: Sequence[str],
        *,
        upgrade: bool = False,
    ) -> None:
        """Install (or upgrade) ``packages``."""


class PythonPackageManager(PackageManager):
    """A package manager that can also install a local project."""

    @abstractmethod
    def install_editable(
        self,
        ctx: WorkspaceContext,
        project_dir: Path,
        extras: Sequence[str] = (),
    ) -> None:
        """Install a local project in development mode."""


class VersionControlClient(ToolAdapter):
    """Working-copy operations used by the repository synchronizer."""

    @abstractmethod
    def clone(self, ctx: WorkspaceContext, url: str, dest: Path) -> None:
        """Clone ``url`` into ``dest`` (which must not exist)."""

    @abstractmethod
    def pull(self, ctx: WorkspaceContext, repo: Path) -> None:
        """Pull the current branch of ``repo``."""

    @abstractmethod
    def checkout(self, ctx: WorkspaceContext, repo: Path, ref: str) -> None:
        """Check out ``ref`` in ``repo``."""

    @abstractmethod
    def update_submodules(self, ctx: WorkspaceContext, repo: Path) -> None:
        """Initialize and update all nested submodules recursively."""

    @abstractmethod
    def deinit_submodule(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        """Force-deinitialize the submodule at ``path``."""

    @abstractmethod
    def remove_path(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        """Remove ``path`` from the working tree and the index."""


class ContainerBuilder(ToolAdapter):
    """Builds and runs container images."""

    @abstractmethod
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
        """Build ``build_context`` (a directory or remote reference) as ``tag``."""

    @abstractmethod
    def run(self, ctx: WorkspaceContext, image: str, *, interactive: bool = True) -> None:
        """Run ``image`` in the foreground."""


class NativeBuildSystem(ToolAdapter):
    """Out-of-source native builds."""

    @abstractmethod
    def configure(
        self,
        ctx: WorkspaceContext,
        source_dir: Path,
        build_dir: Path,
        defines: Mapping[str, str] | None = None,
    ) -> None:
        """Generate the build tree for ``source_dir`` in ``build_dir``."""

    @abstractmethod
    def build(
        self,
        ctx: WorkspaceContext,
        build_dir: Path,
        *,
        target: str | None = None,
        jobs: int | None = None,
    ) -> None:
        """Build the default target, or ``target``."""

    @abstractmethod
    def install(self, ctx: WorkspaceContext, build_dir: Path, *, sudo: bool = True) -> None:
        """Install the built artifacts."""


class CommandRunner(ToolAdapter):
    """Runs one-off commands that have no richer capability."""

    @abstractmethod
    def run(
        self,
        ctx: WorkspaceContext,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        needs_sudo: bool = False,
    ) -> None:
        """Run ``cmd`` to completion."""
