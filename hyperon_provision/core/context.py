"""
Workspace context — the explicit state every step runs against.

Replaces ambient shell state (current directory, sourced environment
files) with a value passed into each step: where we work, where the
operator's home is, and the environment that child processes inherit.
Loading a freshly installed toolchain mutates ``env`` in place so that
every later step sees it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class WorkspaceContext(BaseModel):
    """Paths and environment shared by all provisioning steps."""

    root: Path
    home: Path
    env: dict[str, str] = Field(default_factory=dict)
    repo_dir: str = "opencog-hyperon"

    @classmethod
    def from_environment(
        cls,
        root: Path | str | None = None,
        repo_dir: str = "opencog-hyperon",
    ) -> WorkspaceContext:
        """Snapshot the current process environment into a context."""
        env = dict(os.environ)
        home = Path(env.get("HOME") or Path.home())
        return cls(
            root=Path(root or Path.cwd()).resolve(),
            home=home,
            env=env,
            repo_dir=repo_dir,
        )

    @property
    def repo_path(self) -> Path:
        """Local clone of the synchronized repository."""
        return self.root / self.repo_dir

    @property
    def manifest_path(self) -> Path:
        """The repository's submodule manifest."""
        return self.repo_path / ".gitmodules"

    @property
    def search_path(self) -> str:
        return self.env.get("PATH", "")

    @property
    def cargo_bin(self) -> Path:
        return self.home / ".cargo" / "bin"

    def prepend_path(self, directory: Path) -> None:
        """Put ``directory`` first on the child PATH (no duplicates)."""
        entry = str(directory)
        parts = [p for p in self.search_path.split(os.pathsep) if p and p != entry]
        self.env["PATH"] = os.pathsep.join([entry, *parts])

    def load_toolchain_env(self) -> bool:
        """Equivalent of sourcing ``$HOME/.cargo/env``.

        Returns:
            True if the cargo bin directory exists and is now on PATH.
        """
        if not self.cargo_bin.is_dir():
            logger.debug("No toolchain bin directory at %s", self.cargo_bin)
            return False
        self.prepend_path(self.cargo_bin)
        self.env.setdefault("CARGO_HOME", str(self.home / ".cargo"))
        logger.info("Loaded toolchain environment from %s", self.cargo_bin)
        return True
