"""
Reporting facade — uniform leveled messages for the operator.

``info`` goes to stdout as a blue ``[INFO]`` line, ``error`` to stderr
as a red ``[ERROR]`` line. Every message is mirrored into the logging
tree under ``hyperon_provision.report`` so a log file captures the
same narrative.
"""

from __future__ import annotations

import logging

import click

logger = logging.getLogger("hyperon_provision.report")


class Reporter:
    """Operator-facing messages for every step."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def info(self, message: str) -> None:
        logger.info(message)
        if not self.quiet:
            click.secho("[INFO]", fg="blue", nl=False)
            click.echo(f" {message}")

    def error(self, message: str) -> None:
        logger.error(message)
        click.secho("[ERROR]", fg="red", nl=False, err=True)
        click.echo(f" {message}", err=True)


class RecordingReporter(Reporter):
    """Keeps ``(level, message)`` pairs in memory instead of printing."""

    def __init__(self):
        super().__init__(quiet=True)
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        logger.info(message)
        self.messages.append(("info", message))

    def error(self, message: str) -> None:
        logger.error(message)
        self.messages.append(("error", message))

    @property
    def infos(self) -> list[str]:
        return [m for level, m in self.messages if level == "info"]

    @property
    def errors(self) -> list[str]:
        return [m for level, m in self.messages if level == "error"]

    def contains(self, fragment: str) -> bool:
        return any(fragment in m for _, m in self.messages)
