"""
Submodule manifest — structured read-modify-write of ``.gitmodules``.

The manifest is parsed into sections (a ``[submodule "name"]`` header
plus its key/value body). Every section keeps the raw lines it was
parsed from, so rendering an edited manifest reproduces untouched
sections byte for byte. Removing a submodule drops exactly its section,
whatever its formatting.

Supported syntax is the subset git writes for ``.gitmodules``:

    # comment / ; comment
    [submodule "name"]
        path = some/dir
        url = https://...
        branch = "quoted value"
        shallow

Anything else (a key before the first header, a line that is neither a
header, a key, a comment, nor blank) raises ``ManifestError``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from hyperon_provision.core.errors import ProvisionError

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(
    r'^\s*\[\s*(?P<section>[A-Za-z0-9.-]+)(?:\s+"(?P<subsection>(?:[^"\\]|\\.)*)")?\s*\]\s*(?:[#;].*)?$'
)
_KEY_RE = re.compile(r"^\s*(?P<key>[A-Za-z][A-Za-z0-9-]*)\s*(?:=\s*(?P<value>.*?))?\s*$")


class ManifestError(ProvisionError):
    """The submodule manifest could not be parsed or rewritten."""


def normalize_path(path: str) -> str:
    """Canonical form used to compare submodule paths."""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


def _parse_value(raw: str | None) -> str:
    """Strip quotes and trailing comments from a raw config value."""
    if raw is None:
        return "true"
    if raw.startswith('"'):
        end = raw.find('"', 1)
        while end > 0 and raw[end - 1] == "\\":
            end = raw.find('"', end + 1)
        return raw[1:end] if end > 0 else raw[1:]
    for marker in ("#", ";"):
        idx = raw.find(marker)
        if idx >= 0:
            raw = raw[:idx]
    return raw.strip()


@dataclass
class ManifestSection:
    """One ``[section "subsection"]`` block with its raw lines."""

    section: str
    subsection: str | None
    lines: list[str] = field(default_factory=list)
    entries: dict[str, str] = field(default_factory=dict)

    @property
    def is_submodule(self) -> bool:
        return self.section.lower() == "submodule" and self.subsection is not None

    @property
    def name(self) -> str:
        return self.subsection or ""

    @property
    def path(self) -> str:
        """Declared path, falling back to the submodule name."""
        return normalize_path(self.entries.get("path", self.name))

    def declares(self, path: str) -> bool:
        """Whether this section declares the submodule at ``path``."""
        if not self.is_submodule:
            return False
        target = normalize_path(path)
        return self.path == target or normalize_path(self.name) == target


@dataclass
class SubmoduleManifest:
    """Parsed ``.gitmodules`` that renders back to its exact source."""

    preamble: list[str] = field(default_factory=list)
    sections: list[ManifestSection] = field(default_factory=list)

    # ── Parsing / rendering ─────────────────────────────────────

    @classmethod
    def parse(cls, text: str) -> SubmoduleManifest:
        manifest = cls()
        current: ManifestSection | None = None

        for line_num, line in enumerate(text.splitlines(keepends=True), start=1):
            stripped = line.strip()

            header = _HEADER_RE.match(line)
            if header:
                current = ManifestSection(
                    section=header.group("section"),
                    subsection=header.group("subsection"),
                    lines=[line],
                )
                manifest.sections.append(current)
                continue

            if not stripped or stripped[0] in "#;":
                (current.lines if current else manifest.preamble).append(line)
                continue

            if stripped.startswith("["):
                raise ManifestError(f"Malformed section header at line {line_num}: {stripped!r}")

            key = _KEY_RE.match(line)
            if key is None:
                raise ManifestError(f"Unparsable line {line_num}: {stripped!r}")
            if current is None:
                raise ManifestError(
                    f"Key '{key.group('key')}' at line {line_num} appears before any section"
                )

            current.lines.append(line)
            current.entries[key.group("key").lower()] = _parse_value(key.group("value"))

        return manifest

    @classmethod
    def load(cls, path: Path) -> SubmoduleManifest:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot read {path}: {e}") from e
        return cls.parse(text)

    def render(self) -> str:
        parts = list(self.preamble)
        for section in self.sections:
            parts.extend(section.lines)
        return "".join(parts)

    def save(self, path: Path) -> None:
        try:
            path.write_text(self.render(), encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot write {path}: {e}") from e
        logger.debug("Rewrote %s (%d sections)", path, len(self.sections))

    # ── Queries / edits ─────────────────────────────────────────

    @property
    def submodules(self) -> list[ManifestSection]:
        return [s for s in self.sections if s.is_submodule]

    @property
    def paths(self) -> set[str]:
        return {s.path for s in self.submodules}

    def find(self, path: str) -> ManifestSection | None:
        """First submodule section declaring ``path``, if any."""
        for section in self.submodules:
            if section.declares(path):
                return section
        return None

    def remove(self, path: str) -> list[ManifestSection]:
        """Drop every section declaring ``path``; return what was dropped."""
        removed = [s for s in self.sections if s.declares(path)]
        if removed:
            self.sections = [s for s in self.sections if not s.declares(path)]
        return removed
