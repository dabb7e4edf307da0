"""
Provisioning ledger — append-only record of orchestrator runs.

Each run appends one NDJSON line with its per-step outcomes, whatever
the run's result. The ledger is for operators reading history after
the fact; the orchestrator never reads it back to make decisions.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from hyperon_provision.core.models.step import InstallationReport

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_DIR = ".state"
DEFAULT_AUDIT_FILE = "provision.ndjson"


class AuditEntry(BaseModel):
    """One orchestrator run."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    operation_type: str = ""       # run, step, sync, build, session

    strategy: str | None = None
    session: str | None = None
    mock: bool = False

    status: str = ""               # ok, failed
    exit_code: int = 0
    steps_total: int = 0
    steps_succeeded: int = 0
    steps_skipped: int = 0
    failed_step: str | None = None
    duration_ms: int = 0

    errors: list[str] = Field(default_factory=list)
    steps: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_report(
        cls,
        report: InstallationReport,
        operation_type: str,
        *,
        duration_ms: int = 0,
        mock: bool = False,
    ) -> AuditEntry:
        failed = report.failed_step
        return cls(
            operation_id=report.operation_id,
            operation_type=operation_type,
            strategy=report.strategy,
            session=report.session,
            mock=mock,
            status=report.status,
            exit_code=report.exit_code,
            steps_total=len(report.records),
            steps_succeeded=report.succeeded,
            steps_skipped=report.skipped,
            failed_step=failed.step if failed else None,
            duration_ms=duration_ms,
            errors=[failed.error] if failed and failed.error else [],
            steps=[r.model_dump(mode="json") for r in report.records],
        )


class AuditWriter:
    """Append-only ledger writer.

    Each call to write() appends a single JSON line to the ledger file.
    The file is created if it doesn't exist.
    """

    def __init__(self, path: Path | None = None, workspace: Path | None = None):
        if path is not None:
            self._path = path
        elif workspace is not None:
            self._path = workspace / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE
        else:
            self._path = Path(DEFAULT_AUDIT_DIR) / DEFAULT_AUDIT_FILE

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append an entry. A ledger write failure never fails the run."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Ledger entry written: %s/%s", entry.operation_type, entry.operation_id)
        except OSError as e:
            logger.error("Failed to write ledger entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """All entries, oldest first. Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        entries = []
        with self._path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.model_validate(json.loads(line)))
                except ValueError as e:
                    logger.warning("Skipping corrupt ledger entry at line %d: %s", line_num, e)
        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        return self.read_all()[-n:]
