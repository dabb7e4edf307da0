"""
Shared test fixtures and configuration.
"""

import stat
from pathlib import Path

import pytest

from hyperon_provision.adapters.registry import Toolbox, build_toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.config import ProvisionConfig
from hyperon_provision.core.observability.reporting import RecordingReporter

DOC_MANIFEST = (
    '[submodule "doc"]\n'
    "\tpath = doc\n"
    "\turl = https://github.com/trueagi-io/hyperon-experimental-doc.git\n"
    '[submodule "lib/metta-stdlib"]\n'
    "\tpath = lib/metta-stdlib\n"
    "\turl = https://github.com/trueagi-io/metta-stdlib.git\n"
)


def make_executable(directory: Path, name: str, body: str = "exit 0\n") -> Path:
    """Drop a fake executable named ``name`` into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(f"#!/bin/sh\n{body}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Empty directory that is the whole PATH of ``ctx``."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def ctx(tmp_path: Path, bin_dir: Path) -> WorkspaceContext:
    """Workspace with an isolated home and PATH."""
    root = tmp_path / "workspace"
    root.mkdir()
    home = tmp_path / "home"
    home.mkdir()
    return WorkspaceContext(
        root=root,
        home=home,
        env={"PATH": str(bin_dir), "HOME": str(home)},
    )


@pytest.fixture
def config(tmp_path: Path) -> ProvisionConfig:
    """Default configuration with the benchmark marker kept inside tmp_path."""
    cfg = ProvisionConfig()
    cfg.benchmark.installed_marker = str(tmp_path / "include" / "benchmark" / "benchmark.h")
    return cfg


@pytest.fixture
def journal() -> list:
    """Global invocation order across every fake."""
    return []


@pytest.fixture
def tools(journal: list) -> Toolbox:
    return build_toolbox(mock_mode=True, journal=journal)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop logging variables the developer may have exported."""
    for name in ("HPV_LOG_LEVEL", "HPV_LOG_FILE", "HPV_LOG_FILE_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory so no provision.yml is picked up."""
    path = tmp_path / "cwd"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def doc_manifest() -> str:
    """Upstream .gitmodules declaring the protected path plus one other."""
    return DOC_MANIFEST


@pytest.fixture
def exe(bin_dir: Path):
    """Factory placing fake executables on ``ctx``'s PATH."""
    return lambda name, body="exit 0\n": make_executable(bin_dir, name, body)


@pytest.fixture
def cargo_toolchain(ctx: WorkspaceContext) -> Path:
    """rustc, cargo and cbindgen installed under ``~/.cargo/bin`` only."""
    for name in ("rustc", "cargo", "cbindgen"):
        make_executable(ctx.cargo_bin, name)
    return ctx.cargo_bin
