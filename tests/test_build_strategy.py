"""
Tests for build strategy selection and dispatch.
"""

import pytest

from hyperon_provision.core.models.config import BuildConfig
from hyperon_provision.core.models.strategy import (
    LocalContainerBuild,
    NativeBuild,
    RemoteContainerBuild,
    StagedContainerBuild,
)
from hyperon_provision.core.services.build_strategy import (
    describe_strategy,
    execute_strategy,
    select_strategy,
)


class TestSelectStrategy:
    def test_default_from_config(self):
        assert isinstance(select_strategy(None, BuildConfig()), NativeBuild)

    def test_explicit_kind_overrides_config(self):
        strategy = select_strategy("staged-container", BuildConfig(target="runtime"))
        assert isinstance(strategy, StagedContainerBuild)
        assert strategy.target == "runtime"

    def test_remote_uses_configured_ref(self):
        strategy = select_strategy("remote-container", BuildConfig(remote_ref="git@x#dev"))
        assert strategy.remote_ref == "git@x#dev"
        assert strategy.image == "trueagi/hyperon"

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown build strategy 'podman'"):
            select_strategy("podman", BuildConfig())


class TestDescribe:
    def test_native(self):
        assert describe_strategy(NativeBuild()) == "native CMake build in build/ + check"

    def test_staged(self):
        assert "stage 'build'" in describe_strategy(StagedContainerBuild())


class TestExclusivity:
    """One strategy drives exactly one family of build invocations."""

    def test_native(self, ctx, tools, reporter):
        ctx.repo_path.mkdir()
        execute_strategy(NativeBuild(jobs=4), ctx, tools, reporter)

        build_dir = ctx.repo_path / "build"
        assert build_dir.is_dir()
        assert tools.cmake.calls == [
            ("cmake", "configure", str(ctx.repo_path), str(build_dir), {}),
            ("cmake", "build", str(build_dir), None),
            ("cmake", "build", str(build_dir), "check"),
        ]
        assert tools.docker.calls == []

    def test_native_without_test_target(self, ctx, tools, reporter):
        ctx.repo_path.mkdir()
        execute_strategy(NativeBuild(test_target=None), ctx, tools, reporter)
        assert tools.cmake.operations() == ["configure", "build"]

    def test_local_container(self, ctx, tools, reporter):
        execute_strategy(LocalContainerBuild(), ctx, tools, reporter)
        assert tools.docker.calls == [("docker", "build", ".", "trueagi/hyperon", None, {})]
        assert tools.cmake.calls == []
        assert reporter.contains("Docker image 'trueagi/hyperon' built successfully.")

    def test_remote_container(self, ctx, tools, reporter):
        execute_strategy(RemoteContainerBuild(), ctx, tools, reporter)
        assert tools.docker.calls == [
            (
                "docker",
                "build",
                "https://github.com/trueagi-io/hyperon-experimental.git#main",
                "trueagi/hyperon",
                None,
                {"BUILDKIT_CONTEXT_KEEP_GIT_DIR": "1"},
            )
        ]
        assert tools.cmake.calls == []

    def test_remote_container_without_git_dir(self, ctx, tools, reporter):
        execute_strategy(RemoteContainerBuild(keep_git_dir=False), ctx, tools, reporter)
        assert tools.docker.calls[0][-1] == {}

    def test_staged_container(self, ctx, tools, reporter):
        execute_strategy(StagedContainerBuild(), ctx, tools, reporter)
        assert tools.docker.calls == [("docker", "build", ".", "trueagi/hyperon", "build", {})]
        assert tools.cmake.calls == []
