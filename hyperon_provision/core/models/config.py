"""
Provisioning configuration — loaded from provision.yml.

Every field has a default, so an absent file means "provision
OpenCog Hyperon the standard way". The file only needs to name what
differs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from hyperon_provision.core.models.strategy import SESSION_KINDS, STRATEGY_KINDS

DEFAULT_SYSTEM_PACKAGES = [
    "python3",
    "python3-dev",
    "python3-pip",
    "build-essential",
    "cmake",
    "libssl-dev",
    "zlib1g-dev",
    "libgtk-3-dev",
    "curl",
    "git",
    "wget",
    "librocksdb-dev",
    "libgoogle-perftools-dev",
]


class RepositoryConfig(BaseModel):
    """The repository to synchronize and the path it must never contain."""

    url: str = "https://github.com/trueagi-io/hyperon-experimental.git"
    directory: str = "opencog-hyperon"
    excluded_path: str = "doc"


class ToolchainConfig(BaseModel):
    """Rust toolchain and the helpers installed on top of it."""

    rustup_url: str = "https://sh.rustup.rs"
    cargo_packages: list[str] = Field(default_factory=lambda: ["cbindgen"])
    conan_version: str = "2.5.0"
    pip_version: str = "23.1.2"
    python: str = "python3"


class BenchmarkConfig(BaseModel):
    """Google Benchmark, built from source."""

    url: str = "https://github.com/google/benchmark.git"
    version: str = "v1.5.2"
    source_dir: str = "benchmark"
    installed_marker: str = "/usr/local/include/benchmark/benchmark.h"
    cmake_defines: dict[str, str] = Field(
        default_factory=lambda: {
            "CMAKE_BUILD_TYPE": "Release",
            "BENCHMARK_ENABLE_TESTING": "OFF",
        }
    )
    jobs: int | None = None


class LibrariesConfig(BaseModel):
    """Extra native libraries installed as separate steps."""

    rocksdb: list[str] = Field(default_factory=lambda: ["librocksdb-dev"])
    gtk3: list[str] = Field(default_factory=lambda: ["libgtk-3-dev"])


class BuildConfig(BaseModel):
    """Build strategy selection and its parameters."""

    strategy: str = "native"
    image: str = "trueagi/hyperon"
    remote_ref: str = "https://github.com/trueagi-io/hyperon-experimental.git#main"
    target: str = "build"
    build_dir: str = "build"
    test_target: str | None = "check"
    jobs: int | None = None

    @field_validator("strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        if value not in STRATEGY_KINDS:
            raise ValueError(f"unknown strategy '{value}' (valid: {', '.join(STRATEGY_KINDS)})")
        return value


class PythonConfig(BaseModel):
    """MeTTa from PyPI plus the repository's Python module and tests."""

    metta_package: str = "hyperon"
    module_dir: str = "python"
    extras: list[str] = Field(default_factory=lambda: ["dev"])
    tests_dir: str = "tests"
    run_tests: bool = True


class SessionConfig(BaseModel):
    """Optional runtime session after the build."""

    mode: str | None = None
    script: str | None = None
    scripts_dir: str = "tests/scripts"
    script_runner: str = "metta-py"
    repl_features: list[str] = Field(default_factory=lambda: ["python"])
    repl_binary: str = "metta-repl"
    image: str = "trueagi/hyperon"
    tag: str = "latest"

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str | None) -> str | None:
        if value is not None and value not in SESSION_KINDS:
            raise ValueError(f"unknown session mode '{value}' (valid: {', '.join(SESSION_KINDS)})")
        return value


class ProvisionConfig(BaseModel):
    """Root configuration — loaded from provision.yml."""

    version: int = 1

    system_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_SYSTEM_PACKAGES))
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    libraries: LibrariesConfig = Field(default_factory=LibrariesConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    python: PythonConfig = Field(default_factory=PythonConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
