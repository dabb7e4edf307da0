"""
Domain models — pydantic types for provisioning.

All models are re-exported here for convenient access:

    from hyperon_provision.core.models import ProvisionConfig, Step, NativeBuild
"""

from hyperon_provision.core.models.config import (
    BenchmarkConfig,
    BuildConfig,
    LibrariesConfig,
    ProvisionConfig,
    PythonConfig,
    RepositoryConfig,
    SessionConfig,
    ToolchainConfig,
)
from hyperon_provision.core.models.repository import RepositoryState
from hyperon_provision.core.models.step import (
    InstallationReport,
    Step,
    StepOutcome,
    StepRecord,
)
from hyperon_provision.core.models.strategy import (
    BuildStrategy,
    ContainerSession,
    LocalContainerBuild,
    NativeBuild,
    RemoteContainerBuild,
    ReplSession,
    RuntimeSession,
    ScriptSession,
    StagedContainerBuild,
)

__all__ = [
    # config.py
    "BenchmarkConfig",
    "BuildConfig",
    # strategy.py
    "BuildStrategy",
    "ContainerSession",
    # step.py
    "InstallationReport",
    "LibrariesConfig",
    "LocalContainerBuild",
    "NativeBuild",
    "ProvisionConfig",
    "PythonConfig",
    "RemoteContainerBuild",
    "ReplSession",
    "RepositoryConfig",
    # repository.py
    "RepositoryState",
    "RuntimeSession",
    "ScriptSession",
    "SessionConfig",
    "StagedContainerBuild",
    "Step",
    "StepOutcome",
    "StepRecord",
    "ToolchainConfig",
]
