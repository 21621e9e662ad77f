"""Heuristic parser for setup.py.

setup.py is arbitrary Python, so it is scanned with regular expressions
rather than executed or parsed into an AST.  Only two shapes are recognised:

* ``install_requires = [...]`` (assignment or ``setup()`` keyword argument)
* ``extras_require = {...}`` — every list literal inside the dict

Every quoted string inside those lists is one requirement.  Lists built
dynamically (comprehensions, reads from requirements files, concatenation
with names) are not seen.
"""

from __future__ import annotations

import re

import structlog

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.specs import (
    build_declaration,
    find_line,
    is_valid_python_name,
    split_requirement,
)

log = structlog.get_logger("versionlens.engine")

# Bodies skip over quoted strings so a "]" or "}" inside a literal
# (e.g. "pkg[extra]>=1") does not end the match early.
_BODY = r"""(?:[^\]"']|"[^"]*"|'[^']*')*"""
_DICT_BODY = r"""(?:[^}"']|"[^"]*"|'[^']*')*"""

_INSTALL_REQUIRES_RE = re.compile(r"install_requires\s*=\s*\[(" + _BODY + r")\]")
_EXTRAS_REQUIRE_RE = re.compile(r"extras_require\s*=\s*\{(" + _DICT_BODY + r")\}")
_LIST_RE = re.compile(r"\[(" + _BODY + r")\]")
_QUOTED_RE = re.compile(r"""(["'])(.+?)\1""")

# A single-line string literal, or a comment running to end of line.
# Strings are matched first so a "#" inside one is kept.
_STRING_OR_COMMENT_RE = re.compile(r"""("[^"\n]*"|'[^'\n]*')|#[^\n]*""")


def strip_comments(content: str) -> str:
    """Blank out ``#`` comments, leaving line numbering and string literals intact.

    A stray apostrophe in a comment (``# don't pin``) would otherwise open
    a string and swallow the closing bracket of the surrounding list.
    """
    return _STRING_OR_COMMENT_RE.sub(lambda m: m.group(1) or "", content)


class SetupPyParser:
    detection_method = "setup-py"
    file_patterns = ["setup.py"]

    def can_parse(self, file_name: str) -> bool:
        return file_name.lower().endswith("setup.py")

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]:
        lines = content.split("\n")
        deps: list[PackageDeclaration] = []

        for section, body in self._requirement_lists(strip_comments(content)):
            for token in self._quoted_tokens(body):
                dep = self._parse_token(token, lines, file_path, section)
                if dep is not None:
                    deps.append(dep)

        return deps

    @staticmethod
    def _requirement_lists(content: str) -> list[tuple[str, str]]:
        bodies: list[tuple[str, str]] = []
        for m in _INSTALL_REQUIRES_RE.finditer(content):
            bodies.append(("install_requires", m.group(1)))
        for m in _EXTRAS_REQUIRE_RE.finditer(content):
            for list_match in _LIST_RE.finditer(m.group(1)):
                bodies.append(("extras_require", list_match.group(1)))
        return bodies

    @staticmethod
    def _quoted_tokens(body: str) -> list[str]:
        return [m.group(2) for m in _QUOTED_RE.finditer(body)]

    def _parse_token(
        self, token: str, lines: list[str], file_path: str, section: str
    ) -> PackageDeclaration | None:
        parts = split_requirement(token)
        if parts is None:
            return None

        if not is_valid_python_name(parts.base_name):
            log.debug("parser.invalid_name", name=parts.base_name, file=file_path)
            return None

        return build_declaration(
            name=parts.full_name,
            base_name=parts.base_name,
            version_text=parts.version_part,
            lines=lines,
            line_index=find_line(lines, token),
            file_path=file_path,
            detection_method=self.detection_method,
            section=section,
        )
