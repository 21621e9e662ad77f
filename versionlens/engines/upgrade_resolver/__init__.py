"""Upgrade resolver engine — version model, constraints and upgrade picks."""

from versionlens.engines.upgrade_resolver.constraint import (
    OPERATORS,
    satisfies_constraint,
    split_spec,
)
from versionlens.engines.upgrade_resolver.options import (
    UpgradeOption,
    is_version_outdated,
    upgrade_options,
)
from versionlens.engines.upgrade_resolver.resolver import (
    UpgradeCandidates,
    compute_upgrade_options,
    stable_versions,
)
from versionlens.engines.upgrade_resolver.version import Version, compare_versions, parse_version

__all__ = [
    "OPERATORS",
    "UpgradeCandidates",
    "UpgradeOption",
    "Version",
    "compare_versions",
    "compute_upgrade_options",
    "is_version_outdated",
    "parse_version",
    "satisfies_constraint",
    "split_spec",
    "stable_versions",
    "upgrade_options",
]
