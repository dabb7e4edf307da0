"""
Mock adapters — recording test doubles for every capability.

Used by the test-suite and by ``--mock`` runs to rehearse the whole
provisioning sequence without touching external tools. Every fake
records its calls (optionally into a shared journal, so the global
order of invocations across tools can be asserted) and can be told to
fail a given operation with a given exit status.

``MockVersionControl`` also simulates the filesystem effects the
repository synchronizer relies on: clones create a working copy with
the configured upstream ``.gitmodules``, submodule updates materialize
every declared submodule, and removals delete paths the way git does.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from hyperon_provision.adapters.base import (
    CommandRunner,
    ContainerBuilder,
    NativeBuildSystem,
    PackageManager,
    PythonPackageManager,
    VersionControlClient,
)
from hyperon_provision.adapters.shell.command import ToolInvocationError
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.services.gitmodules import SubmoduleManifest

Call = tuple


class _Recorder:
    """Call log, shared journal, and scripted failures."""

    def __init__(
        self,
        adapter_name: str,
        available: bool = True,
        journal: list[Call] | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._journal = journal
        self._failures: dict[str, tuple[int, str]] = {}
        self.calls: list[Call] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        """Number of operations invoked on this fake."""
        return len(self.calls)

    def is_available(self, ctx: WorkspaceContext | None = None) -> bool:
        return self._available

    def set_failure(self, operation: str, return_code: int = 1, error: str = "Mock failure") -> None:
        """Make ``operation`` raise ``ToolInvocationError`` with ``return_code``."""
        self._failures[operation] = (return_code, error)

    def operations(self) -> list[str]:
        return [call[1] for call in self.calls]

    def reset(self) -> None:
        """Clear call log and scripted failures."""
        self.calls.clear()
        self._failures.clear()

    def _record(self, operation: str, *args: object) -> None:
        call = (self._name, operation, *args)
        self.calls.append(call)
        if self._journal is not None:
            self._journal.append(call)
        if operation in self._failures:
            return_code, error = self._failures[operation]
            raise ToolInvocationError(
                [self._name, operation, *(str(a) for a in args)],
                return_code,
                error,
            )


class MockPackageManager(_Recorder, PackageManager):
    def __init__(self, adapter_name: str = "packages", **kwargs):
        super().__init__(adapter_name, **kwargs)

    def refresh(self, ctx: WorkspaceContext) -> None:
        self._record("refresh")

    def install(
        self,
        ctx: WorkspaceContext,
        packages: Sequence[str],
        *,
        upgrade: bool = False,
    ) -> None:
        self._record("install", tuple(packages), upgrade)

    @property
    def installed(self) -> list[str]:
        """Every package passed to ``install``, in order."""
        return [pkg for call in self.calls if call[1] == "install" for pkg in call[2]]


class MockPythonPackageManager(MockPackageManager, PythonPackageManager):
    def install_editable(
        self,
        ctx: WorkspaceContext,
        project_dir: Path,
        extras: Sequence[str] = (),
    ) -> None:
        self._record("install_editable", str(project_dir), tuple(extras))


class MockVersionControl(_Recorder, VersionControlClient):
    """Filesystem-simulating git double.

    Args:
        upstream_manifest: ``.gitmodules`` text of the remote repository.
        reintroduce_on_pull: Rewrite the upstream manifest on every pull,
            as if upstream had re-added a removed submodule.
        edits_manifest: Mirror ``git rm``, which also drops the removed
            submodule's manifest section.
    """

    def __init__(
        self,
        adapter_name: str = "git",
        upstream_manifest: str = "",
        reintroduce_on_pull: bool = False,
        edits_manifest: bool = True,
        **kwargs,
    ):
        super().__init__(adapter_name, **kwargs)
        self.upstream_manifest = upstream_manifest
        self.reintroduce_on_pull = reintroduce_on_pull
        self.edits_manifest = edits_manifest

    def clone(self, ctx: WorkspaceContext, url: str, dest: Path) -> None:
        self._record("clone", url, str(dest))
        dest.mkdir(parents=True)
        (dest / ".git").mkdir()
        (dest / "README.md").write_text(f"cloned from {url}\n")
        if self.upstream_manifest:
            (dest / ".gitmodules").write_text(self.upstream_manifest)

    def pull(self, ctx: WorkspaceContext, repo: Path) -> None:
        self._record("pull", str(repo))
        if self.reintroduce_on_pull and self.upstream_manifest:
            (repo / ".gitmodules").write_text(self.upstream_manifest)

    def checkout(self, ctx: WorkspaceContext, repo: Path, ref: str) -> None:
        self._record("checkout", str(repo), ref)

    def update_submodules(self, ctx: WorkspaceContext, repo: Path) -> None:
        self._record("update_submodules", str(repo))
        manifest_path = repo / ".gitmodules"
        if not manifest_path.is_file():
            return
        for section in SubmoduleManifest.load(manifest_path).submodules:
            checkout = repo / section.path
            checkout.mkdir(parents=True, exist_ok=True)
            (checkout / ".git").write_text(f"gitdir: ../.git/modules/{section.name}\n")
            (repo / ".git" / "modules" / section.name).mkdir(parents=True, exist_ok=True)

    def deinit_submodule(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        self._record("deinit_submodule", str(repo), path)
        checkout = repo / path
        if checkout.is_dir():
            for child in checkout.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                else:
                    child.unlink()

    def remove_path(self, ctx: WorkspaceContext, repo: Path, path: str) -> None:
        self._record("remove_path", str(repo), path)
        target = repo / path
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        manifest_path = repo / ".gitmodules"
        if self.edits_manifest and manifest_path.is_file():
            manifest = SubmoduleManifest.load(manifest_path)
            if manifest.remove(path):
                manifest.save(manifest_path)


class MockContainerBuilder(_Recorder, ContainerBuilder):
    def __init__(self, adapter_name: str = "docker", **kwargs):
        super().__init__(adapter_name, **kwargs)

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
        self._record("build", build_context, tag, target, dict(build_args or {}))

    def run(self, ctx: WorkspaceContext, image: str, *, interactive: bool = True) -> None:
        self._record("run", image, interactive)


class MockNativeBuild(_Recorder, NativeBuildSystem):
    def __init__(self, adapter_name: str = "cmake", **kwargs):
        super().__init__(adapter_name, **kwargs)

    def configure(
        self,
        ctx: WorkspaceContext,
        source_dir: Path,
        build_dir: Path,
        defines: Mapping[str, str] | None = None,
    ) -> None:
        self._record("configure", str(source_dir), str(build_dir), dict(defines or {}))

    def build(
        self,
        ctx: WorkspaceContext,
        build_dir: Path,
        *,
        target: str | None = None,
        jobs: int | None = None,
    ) -> None:
        self._record("build", str(build_dir), target)

    def install(self, ctx: WorkspaceContext, build_dir: Path, *, sudo: bool = True) -> None:
        self._record("install", str(build_dir), sudo)


class MockCommandRunner(_Recorder, CommandRunner):
    """Records commands; ``set_failure`` keys on the command's first word."""

    def __init__(self, adapter_name: str = "shell", **kwargs):
        super().__init__(adapter_name, **kwargs)

    def run(
        self,
        ctx: WorkspaceContext,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        needs_sudo: bool = False,
    ) -> None:
        self._record(cmd[0], tuple(cmd[1:]), str(cwd) if cwd else None)

    @property
    def commands(self) -> list[list[str]]:
        return [[call[1], *call[2]] for call in self.calls]
