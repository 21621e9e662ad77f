"""Custom exceptions for versionlens."""


class VersionLensError(Exception):
    """Base exception for all versionlens errors."""


class ConfigError(VersionLensError):
    """Raised when an environment setting cannot be interpreted."""

    def __init__(self, variable: str, value: str, expected: str):
        self.variable = variable
        self.value = value
        super().__init__(f"{variable}={value!r} is invalid, expected {expected}")


class RegistryError(VersionLensError):
    """Raised when a package registry lookup fails."""


class PackageNotFoundError(RegistryError):
    """Raised when the registry has no package under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"package '{name}' not found in registry")
