"""Registry client engine — published-version lookups on PyPI and npm."""

from versionlens.engines.registry_client.client import (
    NpmClient,
    PyPIClient,
    RegistryClient,
    client_for_manifest,
)

__all__ = ["NpmClient", "PyPIClient", "RegistryClient", "client_for_manifest"]
