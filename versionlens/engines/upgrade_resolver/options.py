"""Turn upgrade candidates into the de-duplicated options shown to a user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from versionlens.engines.upgrade_resolver.resolver import UpgradeCandidates
from versionlens.engines.upgrade_resolver.version import compare_versions, parse_version

OptionKind = Literal["satisfies", "major", "minor", "patch"]

# Higher wins when two slots resolve to the same version string.
_PRIORITY: dict[str, int] = {"satisfies": 4, "patch": 3, "minor": 2, "major": 1}
_SLOT_ORDER: tuple[OptionKind, ...] = ("satisfies", "major", "minor", "patch")


@dataclass(frozen=True)
class UpgradeOption:
    kind: OptionKind
    version: str


def upgrade_options(
    candidates: UpgradeCandidates, current_version: str | None
) -> list[UpgradeOption]:
    """Collapse *candidates* to one option per distinct version.

    When slots share a version only the highest-priority one survives
    (satisfies > patch > minor > major).  Non-satisfies slots equal to
    *current_version* are hidden; ``satisfies`` is always kept.
    Options come out in first-seen slot order.
    """
    by_version: dict[str, UpgradeOption] = {}
    for kind in _SLOT_ORDER:
        version = getattr(candidates, kind)
        if not version:
            continue
        if kind != "satisfies" and version == current_version:
            continue
        existing = by_version.get(version)
        if existing is None or _PRIORITY[kind] > _PRIORITY[existing.kind]:
            by_version[version] = UpgradeOption(kind=kind, version=version)
    return list(by_version.values())


def is_version_outdated(current: str | None, latest: str | None) -> bool:
    """True if *latest* is strictly newer than *current*; False if either is unusable."""
    if not current or not latest:
        return False
    if parse_version(current) is None or parse_version(latest) is None:
        return False
    return compare_versions(latest, current) > 0
