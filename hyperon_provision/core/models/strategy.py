"""
Build strategies and runtime sessions — closed variants chosen by the caller.

Exactly one ``BuildStrategy`` is exercised per run. At most one
``RuntimeSession`` follows it. Both are pydantic discriminated unions
keyed on ``kind`` so they can come from YAML or the CLI alike.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ── Build strategies ────────────────────────────────────────────


class NativeBuild(BaseModel):
    """CMake configure + build + test target in ``<repo>/<build_dir>``."""

    kind: Literal["native"] = "native"
    build_dir: str = "build"
    test_target: str | None = "check"
    jobs: int | None = None


class LocalContainerBuild(BaseModel):
    """``docker build`` with the local checkout as context."""

    kind: Literal["local-container"] = "local-container"
    image: str = "trueagi/hyperon"


class RemoteContainerBuild(BaseModel):
    """``docker build`` straight from a remote git reference."""

    kind: Literal["remote-container"] = "remote-container"
    image: str = "trueagi/hyperon"
    remote_ref: str = "https://github.com/trueagi-io/hyperon-experimental.git#main"
    keep_git_dir: bool = True


class StagedContainerBuild(BaseModel):
    """``docker build`` stopped at an intermediate stage."""

    kind: Literal["staged-container"] = "staged-container"
    image: str = "trueagi/hyperon"
    target: str = "build"


BuildStrategy = Annotated[
    NativeBuild | LocalContainerBuild | RemoteContainerBuild | StagedContainerBuild,
    Field(discriminator="kind"),
]

STRATEGY_KINDS: tuple[str, ...] = (
    "native",
    "local-container",
    "remote-container",
    "staged-container",
)


# ── Runtime sessions ────────────────────────────────────────────


class ScriptSession(BaseModel):
    """Run one MeTTa script from the repository's script directory."""

    kind: Literal["script"] = "script"
    script: str
    scripts_dir: str = "tests/scripts"
    runner: str = "metta-py"


class ReplSession(BaseModel):
    """Interactive REPL built from the checkout with cargo."""

    kind: Literal["repl"] = "repl"
    features: list[str] = Field(default_factory=lambda: ["python"])
    binary: str = "metta-repl"


class ContainerSession(BaseModel):
    """Interactive container from the published image."""

    kind: Literal["container"] = "container"
    image: str = "trueagi/hyperon"
    tag: str = "latest"

    @property
    def reference(self) -> str:
        return f"{self.image}:{self.tag}"


RuntimeSession = Annotated[
    ScriptSession | ReplSession | ContainerSession,
    Field(discriminator="kind"),
]

SESSION_KINDS: tuple[str, ...] = ("script", "repl", "container")
