"""
Adapter registry — the toolbox of capability adapters a run uses.

The step library never constructs adapters itself; it receives a
``Toolbox``. ``build_toolbox`` wires the real CLI-backed adapters, or
the recording fakes when mock mode is on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from hyperon_provision.adapters.base import (
    CommandRunner,
    ContainerBuilder,
    NativeBuildSystem,
    PackageManager,
    PythonPackageManager,
    ToolAdapter,
    VersionControlClient,
)
from hyperon_provision.core.context import WorkspaceContext

logger = logging.getLogger(__name__)


@dataclass
class Toolbox:
    """One adapter per external tool family."""

    apt: PackageManager
    pip: PythonPackageManager
    cargo: PackageManager
    git: VersionControlClient
    docker: ContainerBuilder
    cmake: NativeBuildSystem
    shell: CommandRunner
    mock_mode: bool = False

    def adapters(self) -> dict[str, ToolAdapter]:
        return {
            "apt": self.apt,
            "pip": self.pip,
            "cargo": self.cargo,
            "git": self.git,
            "docker": self.docker,
            "cmake": self.cmake,
            "shell": self.shell,
        }

    def adapter_status(self, ctx: WorkspaceContext | None = None) -> dict[str, dict[str, Any]]:
        """Availability of every adapter's underlying tool."""
        status = {}
        for slot, adapter in self.adapters().items():
            status[slot] = {
                "name": adapter.name,
                "available": adapter.is_available(ctx),
                "type": adapter.__class__.__name__,
            }
        return status


def build_toolbox(
    python: str = "python3",
    mock_mode: bool = False,
    journal: list | None = None,
) -> Toolbox:
    """Create the toolbox for a run.

    Args:
        python: Interpreter used for ``-m pip``.
        mock_mode: Use recording fakes instead of real tools.
        journal: Shared call journal for the fakes (mock mode only).
    """
    if mock_mode:
        from hyperon_provision.adapters.mock import (
            MockCommandRunner,
            MockContainerBuilder,
            MockNativeBuild,
            MockPackageManager,
            MockPythonPackageManager,
            MockVersionControl,
        )

        logger.info("Mock mode: external tools are simulated")
        return Toolbox(
            apt=MockPackageManager("apt", journal=journal),
            pip=MockPythonPackageManager("pip", journal=journal),
            cargo=MockPackageManager("cargo", journal=journal),
            git=MockVersionControl(journal=journal),
            docker=MockContainerBuilder(journal=journal),
            cmake=MockNativeBuild(journal=journal),
            shell=MockCommandRunner(journal=journal),
            mock_mode=True,
        )

    from hyperon_provision.adapters.build.cmake import CMakeAdapter
    from hyperon_provision.adapters.containers.docker import DockerAdapter
    from hyperon_provision.adapters.packages.apt import AptPackageManager
    from hyperon_provision.adapters.packages.cargo import CargoPackageManager
    from hyperon_provision.adapters.packages.pip import PipPackageManager
    from hyperon_provision.adapters.shell.command import ShellCommandAdapter
    from hyperon_provision.adapters.vcs.git import GitAdapter

    return Toolbox(
        apt=AptPackageManager(),
        pip=PipPackageManager(python),
        cargo=CargoPackageManager(),
        git=GitAdapter(),
        docker=DockerAdapter(),
        cmake=CMakeAdapter(),
        shell=ShellCommandAdapter(),
    )
