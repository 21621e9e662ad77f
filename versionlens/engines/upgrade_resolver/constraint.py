"""Constraint operators and satisfaction checks."""

from __future__ import annotations

import re

from versionlens.engines.upgrade_resolver.version import (
    Version,
    compare_versions,
    component,
    parse_version,
)

# Every operator the parsers can hand us.  "" means no operator was written
# and behaves like "==" when checking a candidate.
OPERATORS = ("", "==", ">=", ">", "<=", "<", "!=", "~=", "^", "~")

_SPEC_RE = re.compile(r"^([~^>=<!]*)(.*)$", re.DOTALL)


def split_spec(spec: str) -> tuple[str, str]:
    """Split ``">=1.2.0"`` into ``(">=", "1.2.0")``.

    The operator is the longest leading run of ``~ ^ > = < !``; the rest
    (whitespace-trimmed) is the version text.  ``"1.2.0"`` gives ``("", "1.2.0")``.
    """
    m = _SPEC_RE.match(spec.strip())
    if not m:  # pragma: no cover - the pattern matches every string
        return "", spec.strip()
    return m.group(1), m.group(2).strip()


def satisfies_constraint(
    candidate: str | Version,
    operator: str,
    reference: str | Version,
) -> bool:
    """Return True if *candidate* satisfies ``operator reference``.

    Unknown operators behave like ``>=``.  Unparseable versions never satisfy.
    """
    cand = parse_version(candidate) if isinstance(candidate, str) else candidate
    ref = parse_version(reference) if isinstance(reference, str) else reference
    if cand is None or ref is None:
        return False

    cmp = compare_versions(cand, ref)
    same_major = component(cand, 0) == component(ref, 0)
    same_minor = same_major and component(cand, 1) == component(ref, 1)

    if operator in ("", "=="):
        return cmp == 0
    if operator == ">=":
        return cmp >= 0
    if operator == ">":
        return cmp > 0
    if operator == "<=":
        return cmp <= 0
    if operator == "<":
        return cmp < 0
    if operator == "!=":
        return cmp != 0
    if operator in ("~=", "~"):
        return same_minor and cmp >= 0
    if operator == "^":
        return same_major and cmp >= 0
    return cmp >= 0
