"""Helpers shared by the manifest parsers.

Requirement-string splitting, name validity and the text searches used to
map a parsed entry back to a line/offset in the original document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.upgrade_resolver.constraint import split_spec

# PEP 508 simplified: name, optional [extras], then whatever follows.
_REQUIREMENT_RE = re.compile(
    r"^([A-Za-z0-9_.-]+(?:\[[A-Za-z0-9_,.\s-]*\])?)"  # name + optional extras
    r"(.*)$",  # version specifiers, markers, comments
    re.DOTALL,
)

# Registry names accepted for lookups.  Dots are rejected on purpose so that
# module paths and URLs picked up by the heuristic parsers never reach PyPI.
_PYTHON_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Trailing environment markers / inline comments.
_MARKER_SPLIT_RE = re.compile(r"[;#]")

_NOT_A_REQUIREMENT = ("+", ":", "/", "\\")


@dataclass(frozen=True)
class RequirementParts:
    full_name: str  # "requests[socks]"
    base_name: str  # "requests"
    version_part: str  # ">=2.0", markers and comments removed


def split_requirement(spec: str) -> RequirementParts | None:
    """Split a requirement string like ``"pkg[extra]>=1.0; python_version<'3.12'"``."""
    m = _REQUIREMENT_RE.match(spec.strip())
    if not m:
        return None
    full_name = m.group(1)
    remainder = m.group(2)
    # "git+https://...", "./local/path": not a registry requirement
    if remainder[:1] in _NOT_A_REQUIREMENT:
        return None
    base_name = full_name.split("[", 1)[0]
    version_part = _MARKER_SPLIT_RE.split(remainder, maxsplit=1)[0].strip()
    if version_part.startswith("@"):
        # PEP 508 direct reference: "pkg @ https://..." pins no version
        version_part = ""
    return RequirementParts(full_name=full_name, base_name=base_name, version_part=version_part)


def is_valid_python_name(name: str) -> bool:
    return bool(_PYTHON_NAME_RE.match(name))


def find_line(lines: list[str], *anchors: str) -> int:
    """Index of the first line containing an anchor, trying anchors in order.

    Returns 0 when nothing matches so the entry is still reported.
    """
    for anchor in anchors:
        if not anchor:
            continue
        for index, line in enumerate(lines):
            if anchor in line:
                return index
    return 0


def find_key_line(lines: list[str], key: str) -> int:
    """Index of the first ``key = ...`` line (TOML style, key optionally quoted), or -1."""
    pattern = re.compile(r"^\s*[\"']?" + re.escape(key) + r"[\"']?\s*=")
    for index, line in enumerate(lines):
        if pattern.match(line):
            return index
    return -1


def span(line_text: str, name: str, tail: str) -> tuple[int, int]:
    """Return (start, end) offsets of *name* and its trailing version text on a line.

    *start* is clamped to 0 when the name is not on the line.
    """
    start = max(0, line_text.find(name))
    end = start + len(name)
    if tail:
        tail_at = line_text.find(tail, end)
        end = tail_at + len(tail) if tail_at >= 0 else end + len(tail)
    return start, end


def build_declaration(
    *,
    name: str,
    base_name: str,
    version_text: str,
    lines: list[str],
    line_index: int,
    file_path: str,
    detection_method: str,
    section: str | None = None,
) -> PackageDeclaration:
    """Create a declaration from a name and its raw version text (``">=1.0"``, ``"*"``, ``""``)."""
    # ">=2.28,<3.0": the first clause is the one compared and rewritten
    first_clause = version_text.split(",", 1)[0]
    operator, version = split_spec(first_clause) if first_clause.strip() else ("", "")
    if version == "*":
        operator, version = "", ""
    line_text = lines[line_index] if 0 <= line_index < len(lines) else ""
    tail = version_text.strip() if version else ""
    start, end = span(line_text, name, tail)
    return PackageDeclaration(
        name=name,
        base_name=base_name,
        current_version=version or None,
        operator=operator,
        line=line_index,
        start_char=start,
        end_char=end,
        file_path=file_path,
        detection_method=detection_method,
        section=section,
    )
