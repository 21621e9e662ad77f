"""CLI entry point: versionlens.

Subcommands:
    versionlens scan requirements.txt            # upgrade options per package
    versionlens scan . --offline --json          # declarations only, every manifest in a dir
    versionlens upgrades "^1.2.0" 1.2.0 1.9.0 2.0.0
    versionlens bump pyproject.toml httpx 0.28.1 --write
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

import click

from versionlens.core.config import LensConfig
from versionlens.core.logging import setup_logging
from versionlens.engines.lens.editor import apply_upgrade
from versionlens.engines.lens.models import LensReport
from versionlens.engines.lens.runner import LensRunner
from versionlens.engines.manifest_parser.models import PackageDeclaration
from versionlens.engines.manifest_parser.registry import ParserDispatcher
from versionlens.engines.registry_client.client import client_for_manifest
from versionlens.engines.upgrade_resolver.constraint import split_spec
from versionlens.engines.upgrade_resolver.options import upgrade_options
from versionlens.engines.upgrade_resolver.resolver import compute_upgrade_options
from versionlens.exceptions import ConfigError

_ICONS = {"satisfies": "=", "major": "!", "minor": "+", "patch": "~"}


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise click.ClickException(f"cannot read {path}: {e}") from e


def _manifests(target: Path, dispatcher: ParserDispatcher) -> list[Path]:
    if target.is_dir():
        return [path for _, path in dispatcher.discover_manifests(target)]
    if dispatcher.select(str(target)) is None:
        raise click.ClickException(f"{target.name} is not a supported manifest")
    return [target]


def _declaration_row(d: PackageDeclaration) -> dict:
    row = asdict(d)
    row["constraint_spec"] = d.constraint_spec
    return row


def _report_rows(report: LensReport) -> list[dict]:
    return [
        {
            **_declaration_row(p.declaration),
            "latest_version": p.latest_version,
            "is_outdated": p.is_outdated,
            "candidates": p.candidates.as_dict(),
            "options": [asdict(o) for o in p.options],
            "error": p.error,
        }
        for p in report.packages
    ]


def _print_report(report: LensReport) -> None:
    click.echo(f"{report.file_path}")
    if not report.packages:
        click.echo("  No dependencies found.")
    for p in report.packages:
        d = p.declaration
        current = d.constraint_spec or "(unversioned)"
        if p.error:
            click.echo(f"  {d.line + 1:>4}  {d.name} {current}  [error: {p.error}]")
            continue
        picks = "  ".join(f"{_ICONS[o.kind]} {o.version} ({o.kind})" for o in p.options)
        marker = "*" if p.is_outdated else " "
        click.echo(f"  {d.line + 1:>4} {marker}{d.name} {current}  {picks or 'up to date'}")
    click.echo()


async def _scan_online(
    files: list[Path], config: LensConfig, dispatcher: ParserDispatcher
) -> list[LensReport]:
    runner = LensRunner(config, dispatcher)
    reports: list[LensReport] = []
    for path in files:
        async with client_for_manifest(path.name, config) as client:
            reports.append(await runner.run(str(path), _read(path), client))
    return reports


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """versionlens: find dependency declarations and their upgrade targets."""
    setup_logging("DEBUG" if verbose else None)
    try:
        ctx.obj = LensConfig.from_env()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@main.command("scan")
@click.argument("target", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--exclude", multiple=True, help="Glob pattern of package names to skip")
@click.option("--offline", is_flag=True, help="Only parse; do not query registries")
@click.pass_obj
def scan(
    config: LensConfig, target: Path, as_json: bool, exclude: tuple[str, ...], offline: bool
) -> None:
    """Parse manifests in TARGET (file or directory) and show upgrade options."""
    config = config.with_excludes(exclude)
    dispatcher = ParserDispatcher(exclude_patterns=config.exclude_patterns)
    files = _manifests(target, dispatcher)
    if not files:
        click.echo("No manifests found.")
        return

    if offline:
        by_file = {str(path): dispatcher.parse_document(_read(path), str(path)) for path in files}
        if as_json:
            rows = [_declaration_row(d) for decls in by_file.values() for d in decls]
            click.echo(json.dumps(rows, indent=2))
            return
        for file_path, decls in by_file.items():
            click.echo(file_path)
            for d in decls:
                click.echo(f"  {d.line + 1:>4}  {d.name} {d.constraint_spec}".rstrip())
            click.echo()
        return

    reports = asyncio.run(_scan_online(files, config, dispatcher))
    if as_json:
        click.echo(json.dumps([row for r in reports for row in _report_rows(r)], indent=2))
        return
    for report in reports:
        _print_report(report)


@main.command("upgrades")
@click.argument("spec")
@click.argument("versions", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def upgrades(spec: str, versions: tuple[str, ...], as_json: bool) -> None:
    """Compute upgrade candidates for SPEC against the given VERSIONS."""
    candidates = compute_upgrade_options(spec, list(versions))
    if as_json:
        click.echo(json.dumps(candidates.as_dict(), indent=2))
        return
    for kind, version in candidates.as_dict().items():
        click.echo(f"{kind:<10} {version or '-'}")
    _, current = split_spec(spec)
    shown = upgrade_options(candidates, current or None)
    if shown:
        click.echo("options    " + ", ".join(f"{o.version} ({o.kind})" for o in shown))


@main.command("bump")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("package")
@click.argument("version")
@click.option("--write", is_flag=True, help="Write the change back to MANIFEST")
def bump(manifest: Path, package: str, version: str, write: bool) -> None:
    """Set PACKAGE's version in MANIFEST to VERSION."""
    content = _read(manifest)
    declarations = ParserDispatcher().parse_document(content, str(manifest))
    match = next((d for d in declarations if package in (d.name, d.base_name)), None)
    if match is None:
        raise click.ClickException(f"{package} is not declared in {manifest.name}")

    updated = apply_upgrade(content, match, version)
    if updated == content and match.current_version != version:
        raise click.ClickException(
            f"cannot rewrite the version of {match.name} in {manifest.name}"
        )
    if write:
        manifest.write_text(updated, encoding="utf-8")
        click.echo(f"Updated {match.name} to {version} in {manifest}")
    else:
        click.echo(updated, nl=False)


if __name__ == "__main__":
    main()
