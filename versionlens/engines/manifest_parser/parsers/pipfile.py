"""Parser for Pipfile ([packages] and [dev-packages])."""

from __future__ import annotations

import sys
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.specs import (
    build_declaration,
    find_key_line,
    is_valid_python_name,
)

log = structlog.get_logger("versionlens.engine")

_SECTIONS = ("packages", "dev-packages")


def _version_text(value: Any) -> str:
    """``"*"`` and unversioned tables (git/path/editable sources) mean no constraint."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        version = value.get("version")
        if isinstance(version, str):
            return version
    return ""


class PipfileParser:
    detection_method = "pipfile"
    file_patterns = ["Pipfile"]

    def can_parse(self, file_name: str) -> bool:
        return file_name.lower().endswith("pipfile")

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]:
        try:
            data = tomllib.loads(content)
        except (tomllib.TOMLDecodeError, ValueError) as exc:
            log.warning("parser.malformed", file=file_path, format="toml", error=str(exc))
            return []

        lines = content.split("\n")
        deps: list[PackageDeclaration] = []

        for section in _SECTIONS:
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, value in table.items():
                base_name = name.split("[", 1)[0]
                if not is_valid_python_name(base_name):
                    log.debug("parser.invalid_name", name=base_name, file=file_path)
                    continue

                deps.append(
                    build_declaration(
                        name=name,
                        base_name=base_name,
                        version_text=_version_text(value),
                        lines=lines,
                        line_index=max(0, find_key_line(lines, name)),
                        file_path=file_path,
                        detection_method=self.detection_method,
                        section=section,
                    )
                )

        return deps
