"""Parser for npm package.json manifests."""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from versionlens.engines.manifest_parser.models import PackageDeclaration

log = structlog.get_logger("versionlens.engine")

_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")

# npm package names: optional @scope/ prefix, lowercase alnum plus - . _ ~
_NPM_NAME_RE = re.compile(r"^(@[a-z0-9~-][a-z0-9._~-]*/)?[a-z0-9~-][a-z0-9._~-]*$")

# npm ranges: leading run of ~ ^ > = < then the version
_NPM_SPEC_RE = re.compile(r"^([~^>=<]*)(.*)$", re.DOTALL)


def is_valid_npm_name(name: str) -> bool:
    return bool(_NPM_NAME_RE.match(name))


def split_npm_spec(value: str) -> tuple[str, str]:
    m = _NPM_SPEC_RE.match(value.strip())
    if not m:  # pragma: no cover - the pattern matches every string
        return "", value.strip()
    return m.group(1), m.group(2).strip()


def find_section_entry(lines: list[str], section: str, name: str) -> tuple[int, int, int]:
    """Locate ``"name":`` inside the ``"section": { ... }`` block.

    Returns ``(line, start, end)``; ``(0, 0, 0)`` when the key is not found
    inside its section.
    """
    section_re = re.compile(r'"' + re.escape(section) + r'"\s*:')
    key_re = re.compile(r'"' + re.escape(name) + r'"\s*:')
    quoted = f'"{name}"'

    in_section = False
    for index, line in enumerate(lines):
        if not in_section:
            header = section_re.search(line)
            if header is None:
                continue
            in_section = True
            # inline object: "dependencies": {"a": "1"}
            rest_at = header.end()
            rest = line[rest_at:]
            if key_re.search(rest):
                start = rest_at + rest.find(quoted)
                return index, start, len(line.rstrip())
            if "}" in rest:
                in_section = False
            continue

        if key_re.search(line):
            return index, line.find(quoted), len(line.rstrip())
        if line.strip().startswith("}"):
            in_section = False

    return 0, 0, 0


class PackageJsonParser:
    detection_method = "package-json"
    file_patterns = ["package.json"]

    def can_parse(self, file_name: str) -> bool:
        return file_name.lower().endswith("package.json")

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]:
        try:
            data = json.loads(content)
        except ValueError as exc:
            log.warning("parser.malformed", file=file_path, format="json", error=str(exc))
            return []

        if not isinstance(data, dict):
            log.warning("parser.malformed", file=file_path, format="json", error="not an object")
            return []

        lines = content.split("\n")
        deps: list[PackageDeclaration] = []

        for section in _SECTIONS:
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, value in table.items():
                dep = self._parse_entry(name, value, lines, file_path, section)
                if dep is not None:
                    deps.append(dep)

        return deps

    def _parse_entry(
        self, name: str, value: Any, lines: list[str], file_path: str, section: str
    ) -> PackageDeclaration | None:
        if not is_valid_npm_name(name):
            log.debug("parser.invalid_name", name=name, file=file_path)
            return None
        if not isinstance(value, str):
            log.debug("parser.skip_non_string", name=name, file=file_path, section=section)
            return None

        operator, version = split_npm_spec(value)
        line, start, end = find_section_entry(lines, section, name)

        return PackageDeclaration(
            name=name,
            base_name=name,
            current_version=version or None,
            operator=operator,
            line=line,
            start_char=start,
            end_char=max(start, end),
            file_path=file_path,
            detection_method=self.detection_method,
            section=section,
        )
