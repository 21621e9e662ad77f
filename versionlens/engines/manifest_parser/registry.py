"""Parser registry — pick the parser for a manifest and filter its output."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.parsers import DEFAULT_PARSERS

log = structlog.get_logger("versionlens.engine")


@runtime_checkable
class ManifestParser(Protocol):
    """Interface that every manifest parser must satisfy."""

    detection_method: str
    file_patterns: list[str]

    def can_parse(self, file_name: str) -> bool: ...

    def parse(self, file_path: str, content: str) -> list[PackageDeclaration]: ...


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob (``*`` any run, ``?`` one character) into a full-match regex."""
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def should_exclude_package(name: str, patterns: Iterable[str]) -> bool:
    """True if *name* matches any of the glob *patterns* in full."""
    return any(glob_to_regex(p).fullmatch(name) for p in patterns)


class ParserDispatcher:
    """Routes a document to the first parser that accepts its file name.

    Stateless apart from its parser list and compiled exclusion patterns,
    so one instance can be shared by any number of callers.
    """

    def __init__(
        self,
        parsers: Sequence[ManifestParser] | None = None,
        exclude_patterns: Iterable[str] = (),
    ) -> None:
        self._parsers: tuple[ManifestParser, ...] = (
            tuple(parsers) if parsers is not None else DEFAULT_PARSERS
        )
        self._exclude_patterns = tuple(exclude_patterns)
        self._exclude_res = tuple(glob_to_regex(p) for p in self._exclude_patterns)

    @property
    def parsers(self) -> tuple[ManifestParser, ...]:
        return self._parsers

    @property
    def exclude_patterns(self) -> tuple[str, ...]:
        return self._exclude_patterns

    def select(self, file_name: str) -> ManifestParser | None:
        """Return the first parser whose ``can_parse`` accepts *file_name*."""
        for parser in self._parsers:
            if parser.can_parse(file_name):
                return parser
        return None

    def is_excluded(self, name: str) -> bool:
        return any(r.fullmatch(name) for r in self._exclude_res)

    def parse_document(self, content: str, file_name: str) -> list[PackageDeclaration]:
        """Parse *content* as the manifest named *file_name*.

        Returns ``[]`` for unsupported files.  Declarations whose declared
        name matches an exclusion pattern are dropped.  Never raises.
        """
        parser = self.select(file_name)
        if parser is None:
            return []

        try:
            packages = parser.parse(file_name, content)
        except Exception:
            log.exception("parser.failed", file=file_name, detection_method=parser.detection_method)
            return []

        kept = [p for p in packages if not self.is_excluded(p.name)]
        log.debug(
            "parser.parsed",
            file=file_name,
            detection_method=parser.detection_method,
            found=len(packages),
            excluded=len(packages) - len(kept),
        )
        return kept

    def discover_manifests(self, repo_path: Path) -> list[tuple[ManifestParser, Path]]:
        """Walk *repo_path* and match manifest files to parsers.

        Each file is claimed once, by the parser ``parse_document`` would
        use for it.  Returns (parser, matched_file) pairs.
        """
        matches: list[tuple[ManifestParser, Path]] = []
        seen: set[Path] = set()
        for candidate in self._parsers:
            for pattern in candidate.file_patterns:
                for hit in sorted(repo_path.glob(pattern)):
                    if not hit.is_file() or hit in seen:
                        continue
                    owner = self.select(str(hit))
                    if owner is None:
                        continue
                    seen.add(hit)
                    matches.append((owner, hit))
        return matches


def parse_document(
    content: str, file_name: str, exclude_patterns: Iterable[str] = ()
) -> list[PackageDeclaration]:
    """One-shot :meth:`ParserDispatcher.parse_document` with the default parsers."""
    return ParserDispatcher(exclude_patterns=exclude_patterns).parse_document(content, file_name)
