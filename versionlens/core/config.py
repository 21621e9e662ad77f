"""Runtime configuration for versionlens.

One :class:`LensConfig` is built at startup (usually via :meth:`LensConfig.from_env`)
and handed to whatever needs it.  Nothing reads configuration from globals.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from versionlens.exceptions import ConfigError

_DEFAULT_CACHE_TTL = 3600.0  # seconds
_DEFAULT_TIMEOUT = 10.0  # seconds
_DEFAULT_PYPI_INDEX = "https://pypi.org"
_DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"


@dataclass(frozen=True)
class LensConfig:
    """Settings shared by the dispatcher, registry clients and the CLI."""

    exclude_patterns: tuple[str, ...] = ()
    cache_ttl: float = _DEFAULT_CACHE_TTL
    pypi_index: str = _DEFAULT_PYPI_INDEX
    npm_registry: str = _DEFAULT_NPM_REGISTRY
    timeout: float = _DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> LensConfig:
        """Build a config from ``VERSIONLENS_*`` environment variables.

        Supported variables:
            VERSIONLENS_EXCLUDE       — comma-separated glob patterns
            VERSIONLENS_CACHE_TTL     — registry cache lifetime in seconds
            VERSIONLENS_PYPI_INDEX    — PyPI base URL
            VERSIONLENS_NPM_REGISTRY  — npm registry base URL
            VERSIONLENS_TIMEOUT       — HTTP timeout in seconds
        """
        raw_exclude = os.environ.get("VERSIONLENS_EXCLUDE", "")
        patterns = tuple(p.strip() for p in raw_exclude.split(",") if p.strip())
        return cls(
            exclude_patterns=patterns,
            cache_ttl=_env_float("VERSIONLENS_CACHE_TTL", _DEFAULT_CACHE_TTL),
            pypi_index=os.environ.get("VERSIONLENS_PYPI_INDEX", _DEFAULT_PYPI_INDEX).rstrip("/"),
            npm_registry=os.environ.get("VERSIONLENS_NPM_REGISTRY", _DEFAULT_NPM_REGISTRY).rstrip(
                "/"
            ),
            timeout=_env_float("VERSIONLENS_TIMEOUT", _DEFAULT_TIMEOUT),
        )

    def with_excludes(self, patterns: tuple[str, ...] | list[str]) -> LensConfig:
        """Return a copy with *patterns* appended to the exclusion list."""
        return replace(self, exclude_patterns=self.exclude_patterns + tuple(patterns))


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(name, raw, "a number") from None
    if value < 0:
        raise ConfigError(name, raw, "a non-negative number")
    return value
