"""Shared fixtures for versionlens tests (no network required)."""

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
