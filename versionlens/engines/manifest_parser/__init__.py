"""Manifest parser engine — find dependency declarations in manifest files."""

from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.registry import (
    ManifestParser,
    ParserDispatcher,
    parse_document,
    should_exclude_package,
)

__all__ = [
    "ManifestParser",
    "PackageDeclaration",
    "ParserDispatcher",
    "parse_document",
    "should_exclude_package",
]
