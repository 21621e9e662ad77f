"""Async package-registry clients with retries and a TTL cache.

They answer one question for the upgrade resolver: which version strings
has package X published?  The lists are returned unfiltered.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from versionlens.core.config import LensConfig
from versionlens.exceptions import PackageNotFoundError, RegistryError

log = structlog.get_logger("versionlens.engine")

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds
_USER_AGENT = "versionlens/0.1"


class RegistryClient(ABC):
    """Base class: GET a JSON document per package, cache it, retry transient failures."""

    registry_name = "registry"

    def __init__(self, base_url: str, *, cache_ttl: float = 3600.0, timeout: float = 10.0) -> None:
        self._cache_ttl = cache_ttl
        self._cache: dict[str, tuple[float, dict[str, Any]]] = {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
            timeout=timeout,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_all_versions(self, name: str) -> list[str]:
        """Every version string published for *name*, pre-releases included."""
        document = await self.get_package_document(name)
        return self._versions_from(document)

    async def get_latest_version(self, name: str) -> str | None:
        document = await self.get_package_document(name)
        return self._latest_from(document)

    async def get_package_document(self, name: str) -> dict[str, Any]:
        """Fetch (or serve from cache) the registry JSON for *name*."""
        if self.is_cache_valid(name):
            return self._cache[name][1]

        response = await self._request_with_retry(self._package_path(name), name)
        try:
            document = response.json()
        except ValueError as exc:
            raise RegistryError(f"{self.registry_name} returned invalid JSON for {name}") from exc
        if not isinstance(document, dict):
            raise RegistryError(f"{self.registry_name} returned unexpected payload for {name}")

        self._cache[name] = (time.monotonic(), document)
        return document

    def is_cache_valid(self, name: str) -> bool:
        cached = self._cache.get(name)
        if cached is None:
            return False
        return time.monotonic() - cached[0] < self._cache_ttl

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── per-registry hooks ─────────────────────────────────────────────────

    @abstractmethod
    def _package_path(self, name: str) -> str:
        """URL path of the package document, relative to the base URL."""
        ...

    @staticmethod
    @abstractmethod
    def _versions_from(document: dict[str, Any]) -> list[str]:
        """Every published version string in *document*."""
        ...

    @staticmethod
    @abstractmethod
    def _latest_from(document: dict[str, Any]) -> str | None:
        """The registry's notion of the latest release, if any."""
        ...

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(self, path: str, name: str) -> httpx.Response:
        """GET with exponential backoff on network errors, timeouts, 429 and 5xx."""
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(path)

                if resp.status_code == 404:
                    raise PackageNotFoundError(name)

                if resp.status_code < 500 and resp.status_code != 429:
                    if resp.status_code >= 400:
                        raise RegistryError(
                            f"{self.registry_name} returned {resp.status_code} for {name}"
                        )
                    return resp

                log.warning(
                    "registry.server_error",
                    registry=self.registry_name,
                    package=name,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = RegistryError(
                    f"{self.registry_name} returned {resp.status_code} for {name}"
                )
            except httpx.TransportError as exc:
                log.warning(
                    "registry.transport_error",
                    registry=self.registry_name,
                    package=name,
                    error=str(exc),
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = RegistryError(f"{self.registry_name} unreachable for {name}: {exc}")

            if attempt < _MAX_RETRIES - 1:
                delay = _RETRY_BASE_DELAY * (2**attempt)
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]


class PyPIClient(RegistryClient):
    """PyPI JSON API: ``/pypi/<name>/json``."""

    registry_name = "pypi"

    def _package_path(self, name: str) -> str:
        return f"/pypi/{quote(name, safe='')}/json"

    @staticmethod
    def _versions_from(document: dict[str, Any]) -> list[str]:
        releases = document.get("releases")
        return list(releases) if isinstance(releases, dict) else []

    @staticmethod
    def _latest_from(document: dict[str, Any]) -> str | None:
        info = document.get("info")
        if isinstance(info, dict):
            return info.get("version") or None
        return None


class NpmClient(RegistryClient):
    """npm registry packuments: ``/<name>`` (scoped names percent-encoded)."""

    registry_name = "npm"

    def _package_path(self, name: str) -> str:
        return f"/{quote(name, safe='@')}"

    @staticmethod
    def _versions_from(document: dict[str, Any]) -> list[str]:
        versions = document.get("versions")
        return list(versions) if isinstance(versions, dict) else []

    @staticmethod
    def _latest_from(document: dict[str, Any]) -> str | None:
        tags = document.get("dist-tags")
        if isinstance(tags, dict) and tags.get("latest"):
            return tags["latest"]
        versions = NpmClient._versions_from(document)
        return versions[-1] if versions else None


def client_for_manifest(file_name: str, config: LensConfig) -> RegistryClient:
    """npm for package.json, PyPI for everything else."""
    if file_name.lower().endswith("package.json"):
        return NpmClient(config.npm_registry, cache_ttl=config.cache_ttl, timeout=config.timeout)
    return PyPIClient(config.pypi_index, cache_ttl=config.cache_ttl, timeout=config.timeout)
