"""
Step library — every provisioning action, and the order they run in.

Each step wraps one external tool family behind a capability adapter
and, when it is idempotent, a precondition from the environment
prober. The order below is fixed by hand; nothing computes it:

    system-packages   compilers, cmake, curl, git, headers
    rust-toolchain    needs curl (system-packages)
    toolchain-env     puts ~/.cargo/bin on PATH for what follows
    cbindgen          needs cargo (rust-toolchain + toolchain-env)
    conan             needs python3-pip (system-packages)
    pip-upgrade
    google-benchmark  needs git + cmake + a C++ compiler
    rocksdb
    gtk3
    metta-pypi
    sync-repo         needs git
    build             needs everything above
    python-module     needs the synchronized repo and the native deps
    python-tests      needs python-module           (optional)
    session           needs the build               (optional)
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from hyperon_provision.adapters.registry import Toolbox
from hyperon_provision.core.context import WorkspaceContext
from hyperon_provision.core.models.config import ProvisionConfig
from hyperon_provision.core.models.step import Step
from hyperon_provision.core.models.strategy import BuildStrategy, RuntimeSession
from hyperon_provision.core.observability.reporting import Reporter
from hyperon_provision.core.services.build_strategy import describe_strategy, execute_strategy
from hyperon_provision.core.services.probe import command_exists
from hyperon_provision.core.services.repo_sync import RepositorySynchronizer
from hyperon_provision.core.services.runtime_session import execute_session

logger = logging.getLogger(__name__)

STEP_ORDER: tuple[str, ...] = (
    "system-packages",
    "rust-toolchain",
    "toolchain-env",
    "cbindgen",
    "conan",
    "pip-upgrade",
    "google-benchmark",
    "rocksdb",
    "gtk3",
    "metta-pypi",
    "sync-repo",
    "build",
    "python-module",
    "python-tests",
    "session",
)


def _has(command: str):
    """Precondition: ``command`` is already on the context's PATH."""
    return lambda ctx: command_exists(command, ctx.env)


class StepLibrary:
    """Builds the Step descriptors for one run."""

    def __init__(self, tools: Toolbox, config: ProvisionConfig, reporter: Reporter):
        self.tools = tools
        self.config = config
        self.reporter = reporter
        self.synchronizer = RepositorySynchronizer(
            tools.git,
            reporter,
            remote_url=config.repository.url,
            excluded_path=config.repository.excluded_path,
        )

    # ── Sequence ────────────────────────────────────────────────

    def sequence(
        self,
        strategy: BuildStrategy,
        session: RuntimeSession | None = None,
        run_tests: bool = True,
    ) -> list[Step]:
        """The fixed provisioning order, with optional steps resolved."""
        steps = [
            self.system_packages(),
            self.rust_toolchain(),
            self.toolchain_env(),
            self.cbindgen(),
            self.conan(),
            self.pip_upgrade(),
            self.google_benchmark(),
            self.rocksdb(),
            self.gtk3(),
            self.metta_pypi(),
            self.sync_repo(),
            self.build(strategy),
            self.python_module(),
        ]
        if run_tests:
            steps.append(self.python_tests())
        if session is not None:
            steps.append(self.session(session))
        return steps

    # ── System packages ─────────────────────────────────────────

    def system_packages(self) -> Step:
        packages = list(self.config.system_packages)

        def action(ctx: WorkspaceContext) -> None:
            self.reporter.info("Updating package lists...")
            self.tools.apt.refresh(ctx)
            self.reporter.info("Installing system dependencies...")
            self.tools.apt.install(ctx, packages)

        return Step("system-packages", "System dependencies", action)

    def rocksdb(self) -> Step:
        packages = list(self.config.libraries.rocksdb)
        return Step(
            "rocksdb",
            "RocksDB",
            lambda ctx: self.tools.apt.install(ctx, packages),
        )

    def gtk3(self) -> Step:
        packages = list(self.config.libraries.gtk3)
        return Step(
            "gtk3",
            "GTK3",
            lambda ctx: self.tools.apt.install(ctx, packages),
        )

    # ── Rust toolchain ──────────────────────────────────────────

    def rust_toolchain(self) -> Step:
        url = self.config.toolchain.rustup_url

        def action(ctx: WorkspaceContext) -> None:
            with tempfile.TemporaryDirectory(prefix="rustup-") as tmp:
                installer = Path(tmp) / "rustup-init.sh"
                self.tools.shell.run(
                    ctx,
                    ["curl", "--proto", "=https", "--tlsv1.2", "-sSf", url, "-o", str(installer)],
                )
                self.tools.shell.run(ctx, ["sh", str(installer), "-y"])
            ctx.load_toolchain_env()

        return Step("rust-toolchain", "Rust toolchain", action, _has("rustc"), idempotent=True)

    def toolchain_env(self) -> Step:
        def action(ctx: WorkspaceContext) -> None:
            if not ctx.load_toolchain_env():
                self.reporter.info(f"No toolchain environment at {ctx.cargo_bin}; using PATH as is.")

        return Step("toolchain-env", "Rust toolchain environment", action)

    def cbindgen(self) -> Step:
        packages = list(self.config.toolchain.cargo_packages)
        return Step(
            "cbindgen",
            "cbindgen",
            lambda ctx: self.tools.cargo.install(ctx, packages),
            _has("cbindgen"),
            idempotent=True,
        )

    # ── Python tooling ──────────────────────────────────────────

    def conan(self) -> Step:
        version = self.config.toolchain.conan_version

        def action(ctx: WorkspaceContext) -> None:
            self.tools.pip.install(ctx, [f"conan=={version}"])
            user_bin = ctx.home / ".local" / "bin"
            if user_bin.is_dir():
                ctx.prepend_path(user_bin)
            self.tools.shell.run(ctx, ["conan", "profile", "detect", "--force"])

        return Step("conan", "Conan", action, _has("conan"), idempotent=True)

    def pip_upgrade(self) -> Step:
        version = self.config.toolchain.pip_version
        return Step(
            "pip-upgrade",
            f"pip {version}",
            lambda ctx: self.tools.pip.install(ctx, [f"pip=={version}"], upgrade=True),
        )

    def metta_pypi(self) -> Step:
        package = self.config.python.metta_package
        return Step(
            "metta-pypi",
            "MeTTa interpreter from PyPI",
            lambda ctx: self.tools.pip.install(ctx, [package]),
        )

    # ── Libraries from source ───────────────────────────────────

    def google_benchmark(self) -> Step:
        bench = self.config.benchmark

        def installed(ctx: WorkspaceContext) -> bool:
            return Path(bench.installed_marker).exists()

        def action(ctx: WorkspaceContext) -> None:
            source = ctx.root / bench.source_dir
            if source.exists():
                logger.debug("Removing stale benchmark checkout %s", source)
                shutil.rmtree(source)
            self.tools.git.clone(ctx, bench.url, source)
            self.tools.git.checkout(ctx, source, bench.version)
            build_dir = source / "build"
            build_dir.mkdir(parents=True, exist_ok=True)
            self.tools.cmake.configure(ctx, source, build_dir, bench.cmake_defines)
            self.tools.cmake.build(ctx, build_dir, jobs=bench.jobs or os.cpu_count())
            self.tools.cmake.install(ctx, build_dir, sudo=True)
            shutil.rmtree(source)

        return Step(
            "google-benchmark",
            f"Google Benchmark {bench.version}",
            action,
            installed,
            idempotent=True,
        )

    # ── Repository, build, tests ────────────────────────────────

    def sync_repo(self) -> Step:
        def action(ctx: WorkspaceContext) -> None:
            state = self.synchronizer.synchronize(ctx)
            logger.info(
                "Synchronized %s: submodules=%s",
                state.local_path,
                ", ".join(sorted(state.submodule_paths)) or "none",
            )

        excluded = self.config.repository.excluded_path
        return Step("sync-repo", f"Repository (excluding '{excluded}')", action)

    def build(self, strategy: BuildStrategy) -> Step:
        return Step(
            "build",
            describe_strategy(strategy),
            lambda ctx: execute_strategy(strategy, ctx, self.tools, self.reporter),
        )

    def python_module(self) -> Step:
        py = self.config.python
        return Step(
            "python-module",
            "Python module (development install)",
            lambda ctx: self.tools.pip.install_editable(
                ctx, ctx.repo_path / py.module_dir, py.extras
            ),
        )

    def python_tests(self) -> Step:
        tests_dir = self.config.python.tests_dir
        python = self.config.toolchain.python
        return Step(
            "python-tests",
            "Python unit tests",
            lambda ctx: self.tools.shell.run(
                ctx, [python, "-m", "pytest", f"./{tests_dir}"], cwd=ctx.repo_path
            ),
        )

    def session(self, session: RuntimeSession) -> Step:
        return Step(
            "session",
            f"MeTTa {session.kind} session",
            lambda ctx: execute_session(session, ctx, self.tools, self.reporter),
        )
