"""LensRunner — parse a manifest, fetch versions, compute upgrade options."""

from __future__ import annotations

import asyncio

import structlog

from versionlens.core.config import LensConfig
from versionlens.engines.lens.models import LensReport, PackageLens
from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.registry import ParserDispatcher
from versionlens.engines.registry_client.client import RegistryClient
from versionlens.engines.upgrade_resolver.options import is_version_outdated, upgrade_options
from versionlens.engines.upgrade_resolver.resolver import compute_upgrade_options
from versionlens.exceptions import RegistryError

log = structlog.get_logger("versionlens.engine")

_MAX_CONCURRENCY = 5


class LensRunner:
    """Orchestration layer: pure parser/resolver engines + registry lookups."""

    def __init__(
        self,
        config: LensConfig,
        dispatcher: ParserDispatcher | None = None,
        *,
        max_concurrency: int = _MAX_CONCURRENCY,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher or ParserDispatcher(exclude_patterns=config.exclude_patterns)
        self._max_concurrency = max_concurrency

    @property
    def dispatcher(self) -> ParserDispatcher:
        return self._dispatcher

    async def run(self, file_path: str, content: str, client: RegistryClient) -> LensReport:
        """Build a :class:`LensReport` for one manifest.

        1. Parse with the dispatcher
        2. Fetch all known versions per distinct base name (bounded concurrency)
        3. Resolve upgrade candidates and de-duplicated options per declaration

        A failed lookup is recorded on that package only.
        """
        report = LensReport(file_path=file_path)

        declarations = self._first_occurrences(self._dispatcher.parse_document(content, file_path))
        if not declarations:
            return report

        names = list(dict.fromkeys(d.base_name for d in declarations))
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _fetch(name: str) -> tuple[list[str], str | None]:
            async with semaphore:
                versions = await client.get_all_versions(name)
                # served from the client cache filled by the call above
                latest = await client.get_latest_version(name)
                return versions, latest

        results = await asyncio.gather(*(_fetch(n) for n in names), return_exceptions=True)

        lookups: dict[str, tuple[list[str], str | None] | BaseException] = {}
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, RegistryError):
                    raise result
                log.warning("lens.lookup_failed", package=name, error=str(result))
                report.errors.append(f"{name}: {result}")
            lookups[name] = result

        for declaration in declarations:
            report.packages.append(self._lens_for(declaration, lookups[declaration.base_name]))

        log.info(
            "lens.done",
            file=file_path,
            packages=len(report.packages),
            outdated=len(report.outdated),
            errors=len(report.errors),
        )
        return report

    @staticmethod
    def _first_occurrences(declarations: list[PackageDeclaration]) -> list[PackageDeclaration]:
        """Keep the first declaration per declared name."""
        seen: set[str] = set()
        kept: list[PackageDeclaration] = []
        for declaration in declarations:
            if declaration.name in seen:
                continue
            seen.add(declaration.name)
            kept.append(declaration)
        return kept

    @staticmethod
    def _lens_for(
        declaration: PackageDeclaration,
        lookup: tuple[list[str], str | None] | BaseException,
    ) -> PackageLens:
        if isinstance(lookup, BaseException):
            return PackageLens(declaration=declaration, error=str(lookup))

        versions, latest = lookup
        candidates = compute_upgrade_options(declaration.constraint_spec, versions)
        return PackageLens(
            declaration=declaration,
            latest_version=latest,
            is_outdated=is_version_outdated(declaration.current_version, latest),
            candidates=candidates,
            options=upgrade_options(candidates, declaration.current_version),
        )
