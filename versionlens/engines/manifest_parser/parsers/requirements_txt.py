"""Parser for pip requirements files (requirements.txt, requirements-dev.txt, ...)."""

from __future__ import annotations

import structlog

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.specs import (
    build_declaration,
    is_valid_python_name,
    split_requirement,
)

log = structlog.get_logger("versionlens.engine")


class RequirementsTxtParser:
    detection_method = "requirements-txt"
    file_patterns = ["requirements*.txt", "*requirements.txt", "requirements/*.txt"]

    def can_parse(self, file_name: str) -> bool:
        lowered = file_name.lower()
        return "requirements" in lowered and lowered.endswith(".txt")

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]:
        deps: list[PackageDeclaration] = []
        lines = content.split("\n")

        for index, raw_line in enumerate(lines):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            # -r, -c, -e, --index-url ...
            if line.startswith("-"):
                continue

            parts = split_requirement(line)
            if parts is None:
                continue

            if not is_valid_python_name(parts.base_name):
                log.debug("parser.invalid_name", name=parts.base_name, file=file_path)
                continue

            deps.append(
                build_declaration(
                    name=parts.full_name,
                    base_name=parts.base_name,
                    version_text=parts.version_part,
                    lines=lines,
                    line_index=index,
                    file_path=file_path,
                    detection_method=self.detection_method,
                )
            )

        return deps
