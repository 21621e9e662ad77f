"""Dotted-numeric version model.

A version is a plain tuple of non-negative integers (``"1.2.3"`` -> ``(1, 2, 3)``).
Missing trailing components compare as zero, so ``"1.2"`` == ``"1.2.0"``.
Anything that is not digits-and-dots (pre-release tags, build metadata,
wildcards) does not parse and is kept out of every comparison.
"""

from __future__ import annotations

import re

import structlog

log = structlog.get_logger("versionlens.engine")

Version = tuple[int, ...]

# Leading constraint-operator characters, stripped before parsing.
_OPERATOR_PREFIX_RE = re.compile(r"^[~^>=<!]+")
_SEGMENT_RE = re.compile(r"^[0-9]+$")


def parse_version(text: str) -> Version | None:
    """Parse *text* into a version tuple, or ``None`` if it is not dotted-numeric.

    Any leading operator characters (``^1.2``, ``>=1.2``) are ignored.
    """
    cleaned = _OPERATOR_PREFIX_RE.sub("", text.strip())
    if not cleaned:
        return None
    parts: list[int] = []
    for segment in cleaned.split("."):
        if not _SEGMENT_RE.match(segment):
            return None
        parts.append(int(segment))
    return tuple(parts)


def component(version: Version, index: int) -> int:
    """Return ``version[index]``, or 0 past the end."""
    return version[index] if index < len(version) else 0


def release_triple(version: Version) -> tuple[int, int, int]:
    """Return (major, minor, patch) with absent components as 0."""
    return component(version, 0), component(version, 1), component(version, 2)


def compare_versions(a: str | Version, b: str | Version) -> int:
    """Compare two versions, returning -1, 0 or 1.

    Strings are parsed with :func:`parse_version`.  A string that does not
    parse is unordered against everything and compares as 0.
    """
    left = parse_version(a) if isinstance(a, str) else a
    right = parse_version(b) if isinstance(b, str) else b
    if left is None or right is None:
        log.debug("version.unordered", left=str(a), right=str(b))
        return 0

    for i in range(max(len(left), len(right))):
        lhs = component(left, i)
        rhs = component(right, i)
        if lhs < rhs:
            return -1
        if lhs > rhs:
            return 1
    return 0
