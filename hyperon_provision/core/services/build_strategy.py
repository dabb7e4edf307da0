"""
Build strategy selector — turn the synchronized repository into an artifact.

The caller names one strategy; ``select_strategy`` builds the variant
from configuration and ``execute_strategy`` dispatches it to exactly
one external build tool. Nothing here inspects the environment to pick
a strategy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from hyperon_provision.adapters.registry import Toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.config import BuildConfig
from hyperon_provision.core.models.strategy import (
    STRATEGY_KINDS,
    BuildStrategy,
    LocalContainerBuild,
    NativeBuild,
    RemoteContainerBuild,
    StagedContainerBuild,
)
from hyperon_provision.core.observability.reporting import Reporter

logger = logging.getLogger(__name__)


def select_strategy(kind: str | None, config: BuildConfig) -> BuildStrategy:
    """Build the strategy variant named ``kind`` (default: ``config.strategy``).

    Raises:
        ValueError: ``kind`` is not a known strategy.
    """
    kind = kind or config.strategy
    if kind == "native":
        return NativeBuild(
            build_dir=config.build_dir,
            test_target=config.test_target,
            jobs=config.jobs,
        )
    if kind == "local-container":
        return LocalContainerBuild(image=config.image)
    if kind == "remote-container":
        return RemoteContainerBuild(image=config.image, remote_ref=config.remote_ref)
    if kind == "staged-container":
        return StagedContainerBuild(image=config.image, target=config.target)
    raise ValueError(f"Unknown build strategy '{kind}'. Valid: {', '.join(STRATEGY_KINDS)}")


def describe_strategy(strategy: BuildStrategy) -> str:
    """One-line human description for step listings and logs."""
    if isinstance(strategy, NativeBuild):
        target = f" + {strategy.test_target}" if strategy.test_target else ""
        return f"native CMake build in {strategy.build_dir}/{target}"
    if isinstance(strategy, LocalContainerBuild):
        return f"container image {strategy.image} from local checkout"
    if isinstance(strategy, RemoteContainerBuild):
        return f"container image {strategy.image} from {strategy.remote_ref}"
    return f"container image {strategy.image} up to stage '{strategy.target}'"


# ── Handlers ────────────────────────────────────────────────────


def _native(strategy: NativeBuild, ctx: WorkspaceContext, tools: Toolbox, reporter: Reporter) -> None:
    build_path = ctx.repo_path / strategy.build_dir
    reporter.info(f"Setting up build directory {build_path} with CMake...")
    build_path.mkdir(parents=True, exist_ok=True)
    tools.cmake.configure(ctx, ctx.repo_path, build_path)
    reporter.info("Building and running tests...")
    tools.cmake.build(ctx, build_path, jobs=strategy.jobs)
    if strategy.test_target:
        tools.cmake.build(ctx, build_path, target=strategy.test_target, jobs=strategy.jobs)
    reporter.info("Build and tests completed successfully.")


def _local_container(
    strategy: LocalContainerBuild, ctx: WorkspaceContext, tools: Toolbox, reporter: Reporter
) -> None:
    reporter.info("Building Docker image from local repository...")
    tools.docker.build(ctx, ".", strategy.image, cwd=ctx.repo_path)
    reporter.info(f"Docker image '{strategy.image}' built successfully.")


def _remote_container(
    strategy: RemoteContainerBuild, ctx: WorkspaceContext, tools: Toolbox, reporter: Reporter
) -> None:
    reporter.info("Building Docker image without local repository...")
    build_args = {"BUILDKIT_CONTEXT_KEEP_GIT_DIR": "1"} if strategy.keep_git_dir else None
    tools.docker.build(ctx, strategy.remote_ref, strategy.image, build_args=build_args)
    reporter.info(f"Docker image '{strategy.image}' built successfully.")


def _staged_container(
    strategy: StagedContainerBuild, ctx: WorkspaceContext, tools: Toolbox, reporter: Reporter
) -> None:
    reporter.info(f"Building Docker image with build target '{strategy.target}'...")
    tools.docker.build(ctx, ".", strategy.image, cwd=ctx.repo_path, target=strategy.target)
    reporter.info(f"Docker image '{strategy.image}' built successfully with build target.")


_HANDLERS: dict[type, Callable[..., None]] = {
    NativeBuild: _native,
    LocalContainerBuild: _local_container,
    RemoteContainerBuild: _remote_container,
    StagedContainerBuild: _staged_container,
}


def execute_strategy(
    strategy: BuildStrategy,
    ctx: WorkspaceContext,
    tools: Toolbox,
    reporter: Reporter,
) -> None:
    """Run the single build invocation family for ``strategy``."""
    logger.info("Executing build strategy: %s", strategy.kind)
    _HANDLERS[type(strategy)](strategy, ctx, tools, reporter)
