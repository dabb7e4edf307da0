"""
Repository state — the synchronized working copy as observed after a sync.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class RepositoryState(BaseModel):
    """Local clone, its declared submodules, and the protected path."""

    local_path: Path
    remote_url: str
    submodule_paths: set[str] = Field(default_factory=set)
    excluded_path: str

    @property
    def excluded_in_tree(self) -> bool:
        return (self.local_path / self.excluded_path).exists()

    @property
    def excluded_in_manifest(self) -> bool:
        return self.excluded_path in self.submodule_paths

    @property
    def is_clean(self) -> bool:
        """The exclusion invariant: protected path in neither tree nor manifest."""
        return not (self.excluded_in_tree or self.excluded_in_manifest)
