"""Data models for the manifest parser engine."""

from __future__ import annotations

from dataclasses import dataclass

from versionlens.engines.upgrade_resolver.version import Version, parse_version


@dataclass(frozen=True)
class PackageDeclaration:
    """A single dependency mention found in a manifest.

    Positions are zero-based: *line* indexes the document's ``\\n``-split
    lines, *start_char*/*end_char* are offsets within that line.
    """

    name: str  # as written, may carry an extras suffix: "uvicorn[standard]"
    base_name: str  # registry lookup key: "uvicorn"
    current_version: str | None
    operator: str  # "" when no operator was written
    line: int
    start_char: int
    end_char: int
    file_path: str
    detection_method: str
    section: str | None = None  # table/list the entry came from

    @property
    def constraint_spec(self) -> str:
        """Operator + version as fed to the resolver; empty when unversioned."""
        if not self.current_version:
            return ""
        return f"{self.operator}{self.current_version}"

    @property
    def version(self) -> Version | None:
        """Parsed current version, ``None`` when absent or not dotted-numeric."""
        if not self.current_version:
            return None
        return parse_version(self.current_version)
