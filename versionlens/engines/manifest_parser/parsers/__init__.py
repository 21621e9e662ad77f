"""Manifest parsers, in dispatch priority order."""

from versionlens.engines.manifest_parser.parsers.package_json import PackageJsonParser
from versionlens.engines.manifest_parser.parsers.pipfile import PipfileParser
from versionlens.engines.manifest_parser.parsers.pyproject_toml import PyprojectTomlParser
from versionlens.engines.manifest_parser.parsers.requirements_txt import RequirementsTxtParser
from versionlens.engines.manifest_parser.parsers.setup_py import SetupPyParser

# First parser whose can_parse() accepts a file wins.
DEFAULT_PARSERS = (
    RequirementsTxtParser(),
    PyprojectTomlParser(),
    SetupPyParser(),
    PipfileParser(),
    PackageJsonParser(),
)

__all__ = [
    "DEFAULT_PARSERS",
    "PackageJsonParser",
    "PipfileParser",
    "PyprojectTomlParser",
    "RequirementsTxtParser",
    "SetupPyParser",
]
