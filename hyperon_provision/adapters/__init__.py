"""Adapters — capability bindings for external tools.

Public re-exports for convenient access.
"""

from hyperon_provision.adapters.base import (
    CommandRunner,
    ContainerBuilder,
    NativeBuildSystem,
    PackageManager,
    PythonPackageManager,
    ToolAdapter,
    VersionControlClient,
)
from hyperon_provision.adapters.registry import Toolbox, build_toolbox

__all__ = [
    "CommandRunner",
    "ContainerBuilder",
    "NativeBuildSystem",
    "PackageManager",
    "PythonPackageManager",
    "ToolAdapter",
    "Toolbox",
    "VersionControlClient",
    "build_toolbox",
]
