"""
Tests for the CLI-backed adapters, the registry, and the recording fakes.
"""

from pathlib import Path

import pytest

from hyperon_provision.adapters.base import PythonPackageManager
from hyperon_provision.adapters.build import cmake
from hyperon_provision.adapters.containers import docker
from hyperon_provision.adapters.mock import (
    MockCommandRunner,
    MockPackageManager,
)
from hyperon_provision.adapters.packages import apt, cargo, pip
from hyperon_provision.adapters.registry import build_toolbox
from hyperon_provision.adapters.shell import command
from hyperon_provision.adapters.shell.command import ToolInvocationError
from hyperon_provision.adapters.vcs import git


@pytest.fixture
def invocations(monkeypatch):
    """Capture every run_command call made by the adapters."""
    calls = []

    def fake_run(cmd, *, cwd=None, env=None, needs_sudo=False, capture=False):
        calls.append({"cmd": list(cmd), "cwd": cwd, "sudo": needs_sudo})

    for module in (apt, pip, cargo, git, docker, cmake, command):
        monkeypatch.setattr(module, "run_command", fake_run)
    return calls


# ── Package managers ─────────────────────────────────────────────────


class TestApt:
    def test_refresh(self, ctx, invocations):
        apt.AptPackageManager().refresh(ctx)
        assert invocations == [{"cmd": ["apt-get", "update"], "cwd": None, "sudo": True}]

    def test_install(self, ctx, invocations):
        apt.AptPackageManager().install(ctx, ["git", "curl"])
        assert invocations[0]["cmd"] == ["apt-get", "install", "-y", "git", "curl"]
        assert invocations[0]["sudo"] is True

    def test_install_nothing(self, ctx, invocations):
        apt.AptPackageManager().install(ctx, [])
        assert invocations == []


class TestPip:
    def test_install_upgrade(self, ctx, invocations):
        pip.PipPackageManager().install(ctx, ["pip==23.1.2"], upgrade=True)
        assert invocations[0]["cmd"] == [
            "python3", "-m", "pip", "install", "--upgrade", "pip==23.1.2",
        ]

    def test_custom_interpreter(self, ctx, invocations):
        manager = pip.PipPackageManager("python3.12")
        manager.install(ctx, ["hyperon"])
        assert invocations[0]["cmd"][0] == "python3.12"
        assert manager.executable == "python3.12"

    def test_install_editable(self, ctx, invocations):
        project = ctx.root / "python"
        pip.PipPackageManager().install_editable(ctx, project, ["dev"])
        assert invocations[0]["cmd"] == ["python3", "-m", "pip", "install", "-e", "./[dev]"]
        assert invocations[0]["cwd"] == project

    def test_install_editable_without_extras(self, ctx, invocations):
        pip.PipPackageManager().install_editable(ctx, ctx.root)
        assert invocations[0]["cmd"][-1] == "./"


class TestCargo:
    def test_install(self, ctx, invocations):
        cargo.CargoPackageManager().install(ctx, ["cbindgen"])
        assert invocations[0]["cmd"] == ["cargo", "install", "--force", "cbindgen"]

    def test_editable_installs_are_pip_only(self):
        assert not hasattr(cargo.CargoPackageManager(), "install_editable")
        assert not hasattr(apt.AptPackageManager(), "install_editable")
        assert isinstance(pip.PipPackageManager(), PythonPackageManager)


# ── Git ──────────────────────────────────────────────────────────────


class TestGit:
    def test_clone(self, ctx, invocations):
        dest = ctx.root / "repo"
        git.GitAdapter().clone(ctx, "https://example.org/r.git", dest)
        assert invocations[0] == {
            "cmd": ["git", "clone", "https://example.org/r.git", str(dest)],
            "cwd": ctx.root,
            "sudo": False,
        }

    def test_submodule_operations(self, ctx, invocations):
        repo = ctx.root / "repo"
        adapter = git.GitAdapter()
        adapter.update_submodules(ctx, repo)
        adapter.deinit_submodule(ctx, repo, "doc")
        adapter.remove_path(ctx, repo, "doc")
        assert [c["cmd"] for c in invocations] == [
            ["git", "submodule", "update", "--init", "--recursive"],
            ["git", "submodule", "deinit", "-f", "--", "doc"],
            ["git", "rm", "-f", "--ignore-unmatch", "--", "doc"],
        ]
        assert all(c["cwd"] == repo for c in invocations)


# ── Docker / CMake ───────────────────────────────────────────────────


class TestDocker:
    def test_build_with_args_and_target(self, ctx, invocations):
        docker.DockerAdapter().build(
            ctx, ".", "trueagi/hyperon", target="build", build_args={"A": "1"}
        )
        assert invocations[0]["cmd"] == [
            "docker", "build", "--build-arg", "A=1", "--target", "build",
            "-t", "trueagi/hyperon", ".",
        ]

    def test_run_interactive(self, ctx, invocations):
        docker.DockerAdapter().run(ctx, "trueagi/hyperon:latest")
        assert invocations[0]["cmd"] == ["docker", "run", "-ti", "trueagi/hyperon:latest"]


class TestCMake:
    def test_configure_build_install(self, ctx, invocations):
        src, build = Path("/src"), Path("/src/build")
        adapter = cmake.CMakeAdapter()
        adapter.configure(ctx, src, build, {"CMAKE_BUILD_TYPE": "Release"})
        adapter.build(ctx, build, target="check", jobs=8)
        adapter.install(ctx, build)
        assert [c["cmd"] for c in invocations] == [
            ["cmake", "-DCMAKE_BUILD_TYPE=Release", "-S", "/src", "-B", "/src/build"],
            ["cmake", "--build", "/src/build", "--target", "check", "--parallel", "8"],
            ["cmake", "--install", "/src/build"],
        ]
        assert invocations[2]["sudo"] is True


class TestShellAdapter:
    def test_defaults_to_workspace_root(self, ctx, invocations):
        command.ShellCommandAdapter().run(ctx, ["metta-py", "x.metta"])
        assert invocations[0]["cwd"] == ctx.root


# ── Registry ─────────────────────────────────────────────────────────


class TestRegistry:
    def test_real_toolbox(self):
        toolbox = build_toolbox(python="python3.11")
        assert not toolbox.mock_mode
        assert isinstance(toolbox.git, git.GitAdapter)
        assert toolbox.pip.executable == "python3.11"
        assert set(toolbox.adapters()) == {"apt", "pip", "cargo", "git", "docker", "cmake", "shell"}

    def test_mock_toolbox_shares_journal(self):
        journal = []
        toolbox = build_toolbox(mock_mode=True, journal=journal)
        assert toolbox.mock_mode
        toolbox.apt.install(None, ["git"])
        toolbox.shell.run(None, ["true"])
        assert [call[0] for call in journal] == ["apt", "shell"]

    def test_adapter_status(self, ctx, exe):
        exe("git")
        status = build_toolbox().adapter_status(ctx)
        assert status["git"]["available"] is True
        assert status["docker"]["available"] is False
        assert status["git"]["type"] == "GitAdapter"


# ── Fakes ────────────────────────────────────────────────────────────


class TestMocks:
    def test_scripted_failure(self, ctx):
        fake = MockPackageManager("apt")
        fake.set_failure("install", return_code=100, error="E: broken")
        with pytest.raises(ToolInvocationError) as exc:
            fake.install(ctx, ["x"])
        assert exc.value.exit_code == 100
        assert "E: broken" in str(exc.value)
        assert fake.call_count == 1

    def test_reset(self, ctx):
        fake = MockCommandRunner()
        fake.set_failure("curl")
        fake.reset()
        fake.run(ctx, ["curl", "-sSf"])
        assert fake.commands == [["curl", "-sSf"]]
