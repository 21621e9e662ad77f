"""Upgrade resolver — pick satisfies / major / minor / patch targets.

Pure computation over a list of published version strings; fetching that
list is somebody else's job (see ``versionlens.engines.registry_client``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key

import structlog

from versionlens.engines.upgrade_resolver.constraint import satisfies_constraint, split_spec
from versionlens.engines.upgrade_resolver.version import (
    Version,
    compare_versions,
    parse_version,
    release_triple,
)

log = structlog.get_logger("versionlens.engine")

# Only plain releases take part: "1.2" or "1.2.3".  Pre-releases, build
# metadata, four-part versions and tags are dropped.
_STABLE_VERSION_RE = re.compile(r"^[0-9]+\.[0-9]+(\.[0-9]+)?$")

_EXACT_OPERATORS = ("", "==")


@dataclass(frozen=True)
class UpgradeCandidates:
    """The four upgrade picks for one declaration; ``None`` where nothing qualifies."""

    satisfies: str | None = None
    major: str | None = None
    minor: str | None = None
    patch: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "satisfies": self.satisfies,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
        }


def is_stable_version(text: str) -> bool:
    return bool(_STABLE_VERSION_RE.match(text))


def stable_versions(known_versions: list[str]) -> list[str]:
    """Filter *known_versions* to plain releases, sorted newest first.

    Exact duplicates are collapsed; versions that only differ by trailing
    zeros (``1.0`` / ``1.0.0``) keep their input order.
    """
    unique = dict.fromkeys(v.strip() for v in known_versions)
    stable = [v for v in unique if is_stable_version(v)]
    return sorted(stable, key=cmp_to_key(compare_versions), reverse=True)


def compute_upgrade_options(constraint_spec: str, known_versions: list[str]) -> UpgradeCandidates:
    """Compute the four upgrade candidates for *constraint_spec*.

    *constraint_spec* is operator + reference version (``"^1.2.0"``,
    ``"==2.0"``, ``"1.4"``).  Every returned version is strictly newer than
    the reference.

    ``satisfies`` is the newest version that still matches the constraint.
    Exact pins can never match a newer version, so for ``""``/``"=="`` it
    falls back to the newest patch release of the same major.minor.

    ``major``/``minor``/``patch`` come from one descending scan; each slot
    keeps the first (highest) version that qualifies for it.
    """
    if not constraint_spec or not known_versions:
        return UpgradeCandidates()

    operator, reference_text = split_spec(constraint_spec)
    reference = parse_version(reference_text)
    if reference is None:
        log.debug("resolver.unparseable_reference", spec=constraint_spec)
        return UpgradeCandidates()

    pool: list[tuple[str, Version]] = []
    for text in stable_versions(known_versions):
        parsed = parse_version(text)
        if parsed is not None:
            pool.append((text, parsed))

    ref_major, ref_minor, ref_patch = release_triple(reference)

    satisfies: str | None = None
    for text, version in pool:
        if compare_versions(version, reference) > 0 and satisfies_constraint(
            version, operator, reference
        ):
            satisfies = text
            break

    if satisfies is None and operator in _EXACT_OPERATORS:
        for text, version in pool:
            major, minor, patch = release_triple(version)
            if major == ref_major and minor == ref_minor and patch > ref_patch:
                satisfies = text
                break

    major_pick: str | None = None
    minor_pick: str | None = None
    patch_pick: str | None = None
    for text, version in pool:
        if compare_versions(version, reference) <= 0:
            continue
        major, minor, patch = release_triple(version)

        if major_pick is None and major > ref_major:
            major_pick = text
        if minor_pick is None and major == ref_major and minor > ref_minor:
            minor_pick = text
        if patch_pick is None and major == ref_major and minor == ref_minor and patch > ref_patch:
            patch_pick = text

    return UpgradeCandidates(
        satisfies=satisfies,
        major=major_pick,
        minor=minor_pick,
        patch=patch_pick,
    )
