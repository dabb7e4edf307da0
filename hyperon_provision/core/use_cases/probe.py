"""
Probe use case — report what the provisioning run would find.

Read-only: nothing is installed or invoked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hyperon_provision.adapters.registry import build_toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.config import ProvisionConfig
from hyperon_provision.core.services.gitmodules import SubmoduleManifest, normalize_path
from hyperon_provision.core.services.probe import probe_commands

PROBED_COMMANDS = (
    "apt-get",
    "curl",
    "git",
    "cmake",
    "python3",
    "rustc",
    "cargo",
    "cbindgen",
    "conan",
    "docker",
)


@dataclass
class ProbeResult:
    workspace: Path
    commands: dict[str, bool] = field(default_factory=dict)
    benchmark_installed: bool = False
    repository_present: bool = False
    submodules: list[str] = field(default_factory=list)
    excluded_path: str = ""
    adapters: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def excluded_present(self) -> bool:
        return self.excluded_path in self.submodules

    def to_dict(self) -> dict:
        return {
            "workspace": str(self.workspace),
            "commands": self.commands,
            "benchmark_installed": self.benchmark_installed,
            "repository_present": self.repository_present,
            "submodules": self.submodules,
            "excluded_path": self.excluded_path,
            "excluded_present": self.excluded_present,
            "adapters": self.adapters,
        }


def probe_environment(config: ProvisionConfig, ctx: WorkspaceContext) -> ProbeResult:
    """Inspect the toolchain, libraries, and working copy.

    Raises:
        ManifestError: the clone's ``.gitmodules`` is malformed.
    """
    ctx.load_toolchain_env()

    result = ProbeResult(
        workspace=ctx.root,
        commands=probe_commands(PROBED_COMMANDS, ctx.env),
        benchmark_installed=Path(config.benchmark.installed_marker).exists(),
        repository_present=ctx.repo_path.is_dir(),
        excluded_path=normalize_path(config.repository.excluded_path),
    )
    if ctx.manifest_path.is_file():
        result.submodules = sorted(SubmoduleManifest.load(ctx.manifest_path).paths)

    toolbox = build_toolbox(python=config.toolchain.python)
    result.adapters = toolbox.adapter_status(ctx)
    return result
