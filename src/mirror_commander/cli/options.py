"""Shared CLI options."""

from __future__ import annotations

import typer

from mirror_commander.models import SourceType

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
SourceTypeOption = typer.Option("dockerhub", "--source-type", "-s", help="Source registry: dockerhub or ghcr")
RegionOption = typer.Option(None, "--region", "-r", help="Target region (default: MCOM_REGION or cn-north-4)")
NamespaceOption = typer.Option(..., "--namespace", "-n", help="Target registry namespace")
RepoOption = typer.Option(..., "--repo", help="Target repository name")
TagOption = typer.Option(None, "--tag", "-t", help="Target tag (default: the source tag)")


def parse_source_type(value: str) -> SourceType:
    try:
        return SourceType.from_str(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--source-type") from e
