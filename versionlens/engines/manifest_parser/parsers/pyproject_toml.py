"""Parser for pyproject.toml.

Two dialects are read from the same file:

* string lists of PEP 508 requirements — ``[project].dependencies``, the
  optional-dependency groups, override/dev variants, ``[tool.uv]`` lists
  and PEP 735 ``[dependency-groups]``;
* Poetry key/value tables — ``[tool.poetry.dependencies]``, legacy
  ``dev-dependencies`` and every ``[tool.poetry.group.<name>.dependencies]``.
  A value is either a constraint string or a table with a ``version`` key;
  tables without one (path, git, url sources) are skipped.
"""

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
    find_line,
    is_valid_python_name,
    split_requirement,
)

log = structlog.get_logger("versionlens.engine")

_PROJECT_EXTRA_LIST_KEYS = ("override-dependencies", "dev-dependencies")
_UV_LIST_KEYS = ("dev-dependencies", "override-dependencies", "constraint-dependencies")


def _table(data: Any, *path: str) -> dict[str, Any]:
    """Walk nested tables, returning {} as soon as a level is missing or not a table."""
    node = data
    for key in path:
        if not isinstance(node, dict):
            return {}
        node = node.get(key)
    return node if isinstance(node, dict) else {}


class PyprojectTomlParser:
    detection_method = "pyproject-toml"
    file_patterns = ["pyproject.toml"]

    def can_parse(self, file_name: str) -> bool:
        return file_name.lower().endswith("pyproject.toml")

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]:
        try:
            data = tomllib.loads(content)
        except (tomllib.TOMLDecodeError, ValueError) as exc:
            log.warning("parser.malformed", file=file_path, format="toml", error=str(exc))
            return []

        lines = content.split("\n")
        deps: list[PackageDeclaration] = []

        for section, entries in self._requirement_lists(data):
            for entry in entries:
                if not isinstance(entry, str):
                    continue
                dep = self._parse_requirement(entry, lines, file_path, section)
                if dep is not None:
                    deps.append(dep)

        for section, table in self._poetry_tables(data):
            for name, value in table.items():
                if name == "python":
                    continue
                dep = self._parse_poetry_entry(name, value, lines, file_path, section)
                if dep is not None:
                    deps.append(dep)

        return deps

    # ── dialect A: PEP 508 string lists ──────────────────────────────────

    @staticmethod
    def _requirement_lists(data: dict[str, Any]) -> list[tuple[str, list[Any]]]:
        lists: list[tuple[str, list[Any]]] = []
        project = _table(data, "project")

        dependencies = project.get("dependencies")
        if isinstance(dependencies, list):
            lists.append(("project.dependencies", dependencies))

        for group, entries in _table(project, "optional-dependencies").items():
            if isinstance(entries, list):
                lists.append((f"project.optional-dependencies.{group}", entries))

        for key in _PROJECT_EXTRA_LIST_KEYS:
            entries = project.get(key)
            if isinstance(entries, list):
                lists.append((f"project.{key}", entries))

        uv = _table(data, "tool", "uv")
        for key in _UV_LIST_KEYS:
            entries = uv.get(key)
            if isinstance(entries, list):
                lists.append((f"tool.uv.{key}", entries))

        for group, entries in _table(data, "dependency-groups").items():
            if isinstance(entries, list):
                lists.append((f"dependency-groups.{group}", entries))

        return lists

    def _parse_requirement(
        self, entry: str, lines: list[str], file_path: str, section: str
    ) -> PackageDeclaration | None:
        parts = split_requirement(entry)
        if parts is None:
            return None

        if not is_valid_python_name(parts.base_name):
            log.debug("parser.invalid_name", name=parts.base_name, file=file_path)
            return None

        line_index = find_line(lines, f'"{entry}"', f"'{entry}'", entry.strip(), parts.full_name)
        return build_declaration(
            name=parts.full_name,
            base_name=parts.base_name,
            version_text=parts.version_part,
            lines=lines,
            line_index=line_index,
            file_path=file_path,
            detection_method=self.detection_method,
            section=section,
        )

    # ── dialect B: Poetry tables ─────────────────────────────────────────

    @staticmethod
    def _poetry_tables(data: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
        poetry = _table(data, "tool", "poetry")
        tables: list[tuple[str, dict[str, Any]]] = []

        main = _table(poetry, "dependencies")
        if main:
            tables.append(("tool.poetry.dependencies", main))

        legacy_dev = _table(poetry, "dev-dependencies")
        if legacy_dev:
            tables.append(("tool.poetry.dev-dependencies", legacy_dev))

        for group in _table(poetry, "group"):
            group_deps = _table(poetry, "group", group, "dependencies")
            if group_deps:
                tables.append((f"tool.poetry.group.{group}.dependencies", group_deps))

        return tables

    def _parse_poetry_entry(
        self, name: str, value: Any, lines: list[str], file_path: str, section: str
    ) -> PackageDeclaration | None:
        base_name = name.split("[", 1)[0]
        if not is_valid_python_name(base_name):
            log.debug("parser.invalid_name", name=base_name, file=file_path)
            return None

        if isinstance(value, str):
            version_text = value
            exact_anchor = f'{name} = "{value}"'
        elif isinstance(value, dict):
            version = value.get("version")
            if not isinstance(version, str):
                log.debug("parser.skip_unversioned", name=name, file=file_path, section=section)
                return None
            version_text = version
            exact_anchor = f"{name} = {{"
        elif isinstance(value, list):
            # multiple-constraint entries: one spec per python/platform
            log.debug("parser.skip_multi_constraint", name=name, file=file_path)
            return None
        else:
            version_text = ""
            exact_anchor = ""

        line_index = self._locate(lines, name, exact_anchor)

        return build_declaration(
            name=name,
            base_name=base_name,
            version_text=version_text,
            lines=lines,
            line_index=line_index,
            file_path=file_path,
            detection_method=self.detection_method,
            section=section,
        )

    @staticmethod
    def _locate(lines: list[str], name: str, exact_anchor: str) -> int:
        """Exact ``name = value`` text first, then a ``name =`` key line, then the bare name."""
        if exact_anchor:
            for index, line in enumerate(lines):
                if exact_anchor in line:
                    return index
        key_line = find_key_line(lines, name)
        if key_line >= 0:
            return key_line
        return find_line(lines, name)
