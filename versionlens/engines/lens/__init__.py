"""Lens engine — manifest parsing + registry lookups + upgrade picks."""

from versionlens.engines.lens.editor import apply_upgrade, replace_version
from versionlens.engines.lens.models import LensReport, PackageLens
from versionlens.engines.lens.runner import LensRunner

__all__ = ["LensReport", "LensRunner", "PackageLens", "apply_upgrade", "replace_version"]
