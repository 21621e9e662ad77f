"""Tests for the lens engine (runner + editor)."""

from __future__ import annotations

import json
import sys

import pytest

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from versionlens.core.config import LensConfig
from versionlens.engines.lens.editor import apply_upgrade, replace_version
from versionlens.engines.lens.runner import LensRunner
from versionlens.engines.manifest_parser.registry import parse_document
from versionlens.engines.upgrade_resolver.options import UpgradeOption
from versionlens.exceptions import PackageNotFoundError, RegistryError


class FakeClient:
    """Stands in for a RegistryClient; counts lookups per package."""

    def __init__(self, packages: dict[str, tuple[list[str], str | None]], fail_with=None):
        self._packages = packages
        self._fail_with = fail_with or {}
        self.calls: list[str] = []

    async def get_all_versions(self, name: str) -> list[str]:
        self.calls.append(name)
        if name in self._fail_with:
            raise self._fail_with[name]
        if name not in self._packages:
            raise PackageNotFoundError(name)
        return self._packages[name][0]

    async def get_latest_version(self, name: str) -> str | None:
        return self._packages[name][1]


REGISTRY = {
    "requests": (["2.28.0", "2.28.2", "2.31.0", "3.0.0rc1"], "2.31.0"),
    "flask": (["2.2.0", "2.3.3", "3.0.0"], "3.0.0"),
    "six": (["1.16.0"], "1.16.0"),
}


# ── LensRunner ───────────────────────────────────────────────────────────


class TestLensRunner:
    @pytest.fixture
    def runner(self):
        return LensRunner(LensConfig())

    @pytest.mark.anyio
    async def test_report(self, runner):
        content = "requests==2.28.0\nflask>=2.2.0\nmissing-pkg==1.0\n"
        report = await runner.run("requirements.txt", content, FakeClient(REGISTRY))

        assert [p.declaration.name for p in report.packages] == [
            "requests",
            "flask",
            "missing-pkg",
        ]
        requests, flask, missing = report.packages

        assert requests.latest_version == "2.31.0"
        assert requests.is_outdated
        assert requests.options == [
            UpgradeOption(kind="satisfies", version="2.28.2"),
            UpgradeOption(kind="minor", version="2.31.0"),
        ]

        assert flask.options == [
            UpgradeOption(kind="satisfies", version="3.0.0"),
            UpgradeOption(kind="minor", version="2.3.3"),
        ]
        assert flask.candidates.major == "3.0.0"

        assert missing.error is not None
        assert missing.options == []
        assert report.errors == ["missing-pkg: package 'missing-pkg' not found in registry"]

    @pytest.mark.anyio
    async def test_outdated(self, runner):
        content = "requests==2.31.0\nflask==2.2.0\n"
        report = await runner.run("requirements.txt", content, FakeClient(REGISTRY))
        assert [p.declaration.name for p in report.outdated] == ["flask"]

    @pytest.mark.anyio
    async def test_first_occurrence_wins(self, runner):
        content = "requests==2.28.0\nrequests==2.0.0\n"
        client = FakeClient(REGISTRY)
        report = await runner.run("requirements.txt", content, client)
        assert len(report.packages) == 1
        assert report.packages[0].declaration.line == 0
        assert client.calls == ["requests"]

    @pytest.mark.anyio
    async def test_one_lookup_per_base_name(self, runner):
        content = "requests==2.28.0\nrequests[socks]==2.28.0\n"
        client = FakeClient(REGISTRY)
        report = await runner.run("requirements.txt", content, client)
        assert len(report.packages) == 2
        assert client.calls == ["requests"]

    @pytest.mark.anyio
    async def test_unversioned_declaration(self, runner):
        report = await runner.run("requirements.txt", "six\n", FakeClient(REGISTRY))
        six = report.packages[0]
        assert six.latest_version == "1.16.0"
        assert not six.is_outdated
        assert six.options == []

    @pytest.mark.anyio
    async def test_excludes_from_config(self):
        runner = LensRunner(LensConfig(exclude_patterns=("fl*",)))
        client = FakeClient(REGISTRY)
        report = await runner.run("requirements.txt", "flask==2.2.0\nsix\n", client)
        assert [p.declaration.name for p in report.packages] == ["six"]
        assert client.calls == ["six"]

    @pytest.mark.anyio
    async def test_registry_error_recorded(self, runner):
        client = FakeClient(REGISTRY, fail_with={"flask": RegistryError("pypi returned 500")})
        report = await runner.run("requirements.txt", "flask==2.2.0\nsix\n", client)
        assert report.packages[0].error == "pypi returned 500"
        assert report.packages[1].error is None
        assert report.errors == ["flask: pypi returned 500"]

    @pytest.mark.anyio
    async def test_unexpected_error_propagates(self, runner):
        client = FakeClient(REGISTRY, fail_with={"flask": KeyError("bug")})
        with pytest.raises(KeyError):
            await runner.run("requirements.txt", "flask==2.2.0\n", client)

    @pytest.mark.anyio
    async def test_unsupported_file(self, runner):
        client = FakeClient(REGISTRY)
        report = await runner.run("notes.md", "requests==2.28.0", client)
        assert report.packages == []
        assert client.calls == []


# ── Editor ───────────────────────────────────────────────────────────────


def _decl(content: str, file_name: str = "requirements.txt", index: int = 0):
    return parse_document(content, file_name)[index]


class TestReplaceVersion:
    def test_keeps_operator(self):
        decl = _decl("requests==2.28.0")
        assert replace_version("requests==2.28.0", decl, "2.31.0") == "requests==2.31.0"

    def test_spaced_operator(self):
        decl = _decl("requests >= 2.0")
        assert replace_version("requests >= 2.0", decl, "2.5") == "requests >= 2.5"

    def test_unversioned_gets_pinned(self):
        decl = _decl("six")
        assert replace_version("six", decl, "1.16.0") == "six==1.16.0"

    def test_keeps_markers(self):
        line = "requests>=2.0 ; python_version<'3.12'"
        assert replace_version(line, _decl(line), "2.31.0") == (
            "requests>=2.31.0 ; python_version<'3.12'"
        )


class TestApplyUpgrade:
    def test_rewrites_only_that_line(self):
        content = "flask==2.2.0\nrequests==2.28.0\n"
        decl = _decl(content, index=1)
        assert apply_upgrade(content, decl, "2.31.0") == "flask==2.2.0\nrequests==2.31.0\n"

    def test_package_json(self):
        content = '{\n  "dependencies": {\n    "left-pad": "^1.0.0"\n  }\n}\n'
        decl = _decl(content, file_name="package.json")
        assert apply_upgrade(content, decl, "1.3.0") == content.replace("^1.0.0", "^1.3.0")

    def test_poetry_caret(self):
        content = '[tool.poetry.dependencies]\npython = "^3.10"\nhttpx = "^0.27.0"\n'
        decl = _decl(content, file_name="pyproject.toml")
        assert apply_upgrade(content, decl, "0.28.1").splitlines()[2] == 'httpx = "^0.28.1"'

    def test_line_out_of_range(self):
        decl = _decl("requests==2.28.0\nflask==2.0\n", index=1)
        assert apply_upgrade("requests==2.28.0", decl, "3.0") == "requests==2.28.0"


class TestApplyUpgradeUnversionedTables:
    def test_pipfile_star(self):
        content = '[packages]\nrequests = "*"\n'
        decl = _decl(content, file_name="Pipfile")
        updated = apply_upgrade(content, decl, "2.31.0")
        assert updated == '[packages]\nrequests = "==2.31.0"\n'
        assert tomllib.loads(updated)["packages"] == {"requests": "==2.31.0"}

    def test_pipfile_reparses_with_version(self):
        content = '[packages]\nrequests = "*"\n'
        updated = apply_upgrade(content, _decl(content, file_name="Pipfile"), "2.31.0")
        reparsed = _decl(updated, file_name="Pipfile")
        assert reparsed.constraint_spec == "==2.31.0"

    def test_pipfile_source_table_left_alone(self):
        content = '[packages]\nmylib = {path = "./mylib", editable = true}\n'
        decl = _decl(content, file_name="Pipfile")
        assert apply_upgrade(content, decl, "1.0.0") == content

    def test_poetry_star(self):
        content = '[tool.poetry.dependencies]\npython = "^3.10"\nblack = "*"\n'
        decl = _decl(content, file_name="pyproject.toml")
        updated = apply_upgrade(content, decl, "24.4.2")
        assert updated.splitlines()[2] == 'black = "24.4.2"'
        assert tomllib.loads(updated)["tool"]["poetry"]["dependencies"]["black"] == "24.4.2"

    def test_package_json_empty_range(self):
        content = '{\n  "dependencies": {\n    "left-pad": ""\n  }\n}\n'
        decl = _decl(content, file_name="package.json")
        updated = apply_upgrade(content, decl, "1.3.0")
        assert json.loads(updated) == {"dependencies": {"left-pad": "1.3.0"}}

    def test_requirement_strings_still_pinned(self):
        content = '[project]\ndependencies = ["six"]\n'
        decl = _decl(content, file_name="pyproject.toml")
        updated = apply_upgrade(content, decl, "1.16.0")
        assert tomllib.loads(updated)["project"]["dependencies"] == ["six==1.16.0"]
