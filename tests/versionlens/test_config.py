"""Tests for LensConfig and logging setup."""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest

from versionlens.core.config import LensConfig
from versionlens.core.logging import setup_logging
from versionlens.exceptions import ConfigError

_VARIABLES = (
    "VERSIONLENS_EXCLUDE",
    "VERSIONLENS_CACHE_TTL",
    "VERSIONLENS_PYPI_INDEX",
    "VERSIONLENS_NPM_REGISTRY",
    "VERSIONLENS_TIMEOUT",
)


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=False):
        for name in _VARIABLES:
            os.environ.pop(name, None)
        yield


class TestLensConfig:
    def test_defaults(self, clean_env):
        config = LensConfig.from_env()
        assert config == LensConfig()
        assert config.cache_ttl == 3600.0
        assert config.pypi_index == "https://pypi.org"
        assert config.npm_registry == "https://registry.npmjs.org"

    def test_reads_environment(self, clean_env):
        env = {
            "VERSIONLENS_EXCLUDE": "test-*, internal-? ,,",
            "VERSIONLENS_CACHE_TTL": "60",
            "VERSIONLENS_PYPI_INDEX": "https://mirror.example.test/",
            "VERSIONLENS_NPM_REGISTRY": "https://npm.example.test/",
            "VERSIONLENS_TIMEOUT": "2.5",
        }
        with patch.dict(os.environ, env):
            config = LensConfig.from_env()
        assert config.exclude_patterns == ("test-*", "internal-?")
        assert config.cache_ttl == 60.0
        assert config.pypi_index == "https://mirror.example.test"
        assert config.npm_registry == "https://npm.example.test"
        assert config.timeout == 2.5

    def test_blank_number_uses_default(self, clean_env):
        with patch.dict(os.environ, {"VERSIONLENS_TIMEOUT": "  "}):
            assert LensConfig.from_env().timeout == 10.0

    def test_non_numeric(self, clean_env):
        with patch.dict(os.environ, {"VERSIONLENS_CACHE_TTL": "an hour"}):
            with pytest.raises(ConfigError) as exc_info:
                LensConfig.from_env()
        assert exc_info.value.variable == "VERSIONLENS_CACHE_TTL"
        assert exc_info.value.value == "an hour"

    def test_negative(self, clean_env):
        with patch.dict(os.environ, {"VERSIONLENS_TIMEOUT": "-1"}):
            with pytest.raises(ConfigError, match="non-negative"):
                LensConfig.from_env()

    def test_with_excludes_appends(self):
        config = LensConfig(exclude_patterns=("a*",))
        assert config.with_excludes(["b?"]).exclude_patterns == ("a*", "b?")
        assert config.exclude_patterns == ("a*",)


class TestSetupLogging:
    def test_level_argument_wins(self):
        with patch.dict(os.environ, {"VERSIONLENS_LOG_LEVEL": "ERROR"}):
            setup_logging("DEBUG")
        assert logging.getLogger("versionlens").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_level_from_environment(self):
        with patch.dict(os.environ, {"VERSIONLENS_LOG_LEVEL": "info"}):
            setup_logging()
        assert logging.getLogger("versionlens").level == logging.INFO
