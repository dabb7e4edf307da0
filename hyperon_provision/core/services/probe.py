"""
Environment prober — is a command already available?

Read-only: resolves names against a PATH and never runs anything.
Used as the precondition of every idempotent step.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Mapping


def command_exists(name: str, env: Mapping[str, str] | None = None) -> bool:
    """Whether ``name`` resolves to an executable on the search path.

    Args:
        name: Command name (e.g. ``rustc``).
        env: Environment whose ``PATH`` is searched. Defaults to the
            current process environment.
    """
    path = env.get("PATH", os.defpath) if env is not None else None
    return shutil.which(name, path=path) is not None


def probe_commands(
    names: Iterable[str],
    env: Mapping[str, str] | None = None,
) -> dict[str, bool]:
    """Probe several commands at once, preserving order."""
    return {name: command_exists(name, env) for name in names}
