"""
Provisioning errors — the failures that abort a run.

Anything raised as a ``ProvisionError`` is fatal under the fail-fast
contract: the orchestrator records the failing step, reports it, and
stops. Precondition checks never raise.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """Base class for fatal provisioning failures."""

    #: Process exit status to surface when this error aborts a run.
    exit_code: int = 1
