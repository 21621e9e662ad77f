"""Rewrite the version of one declaration inside manifest text."""

from __future__ import annotations

import re

from versionlens.engines.manifest_parser.models import PackageDeclaration

# Formats where the version is the value of a "name = value" / "name": value entry.
_TABLE_FORMATS = ("pipfile", "package-json")
_POETRY_SECTION_PREFIX = "tool.poetry."


def is_table_entry(declaration: PackageDeclaration) -> bool:
    """True when the declaration is a key whose string value holds the version."""
    if declaration.detection_method in _TABLE_FORMATS:
        return True
    return (declaration.section or "").startswith(_POETRY_SECTION_PREFIX)


def _unversioned_value(declaration: PackageDeclaration, new_version: str) -> str:
    # Pipfile values are PEP 440 specifiers; Poetry and npm read a bare version as exact
    if declaration.detection_method == "pipfile":
        return f"=={new_version}"
    return new_version


def _set_table_value(line_text: str, declaration: PackageDeclaration, value: str) -> str:
    name = re.escape(declaration.name)
    if declaration.detection_method == "package-json":
        key = r'"' + name + r'"\s*:\s*'
    else:
        key = r"(?<![\w.-])[\"']?" + name + r"[\"']?\s*=\s*"
    pattern = re.compile("(" + key + r""")(["'])[^"']*\2""")
    return pattern.sub(lambda m: f"{m.group(1)}{m.group(2)}{value}{m.group(2)}", line_text, 1)


def replace_version(line_text: str, declaration: PackageDeclaration, new_version: str) -> str:
    """Swap the declaration's version for *new_version* on a single line.

    The written operator is kept (``^1.2.0`` -> ``^1.4.0``).  A declaration
    without a version gets pinned: ``requests`` -> ``requests==2.31.0`` in
    requirement strings; in Pipfile, Poetry and package.json tables the
    string value is replaced (``requests = "*"`` -> ``requests = "==2.31.0"``).
    Entries with no string value to replace (path or git tables) come back
    unchanged.  Only the first occurrence is replaced.
    """
    if not declaration.current_version:
        if is_table_entry(declaration):
            value = _unversioned_value(declaration, new_version)
            return _set_table_value(line_text, declaration, value)
        return line_text.replace(declaration.name, f"{declaration.name}=={new_version}", 1)

    old_spec = f"{declaration.operator}{declaration.current_version}"
    new_spec = f"{declaration.operator}{new_version}"
    if old_spec in line_text:
        return line_text.replace(old_spec, new_spec, 1)
    # "requests >= 2.0": operator and version written apart
    return line_text.replace(declaration.current_version, new_version, 1)


def apply_upgrade(content: str, declaration: PackageDeclaration, new_version: str) -> str:
    """Return *content* with the declaration's line rewritten; other lines untouched."""
    lines = content.split("\n")
    if not 0 <= declaration.line < len(lines):
        return content
    lines[declaration.line] = replace_version(lines[declaration.line], declaration, new_version)
    return "\n".join(lines)
