"""Data models for the lens engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.upgrade_resolver.options import UpgradeOption
from versionlens.engines.upgrade_resolver.resolver import UpgradeCandidates


@dataclass
class PackageLens:
    """A declaration enriched with registry data and upgrade picks."""

    declaration: PackageDeclaration
    latest_version: str | None = None
    is_outdated: bool = False
    candidates: UpgradeCandidates = field(default_factory=UpgradeCandidates)
    options: list[UpgradeOption] = field(default_factory=list)
    error: str | None = None


@dataclass
class LensReport:
    """Result of one LensRunner.run() over a manifest."""

    file_path: str
    packages: list[PackageLens] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def outdated(self) -> list[PackageLens]:
        return [p for p in self.packages if p.is_outdated]
