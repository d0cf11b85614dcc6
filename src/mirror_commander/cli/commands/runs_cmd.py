"""mcom runs - List recent transfer runs."""

from __future__ import annotations

import asyncio

import typer

from mirror_commander.cli.options import OutputOption
from mirror_commander.core.errors import MirrorError
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.core.http import create_http_client
from mirror_commander.models.run import RunStatus
from mirror_commander.output.formatters import output_runs

app = typer.Typer()


@app.callback(invoke_without_command=True)
def runs(
    output: str = OutputOption,
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
    per_page: int = typer.Option(10, "--per-page", min=1, max=100, help="Runs per page"),
) -> None:
    """Show the latest dispatched transfer runs and their results."""
    try:
        total, items = asyncio.run(_fetch_runs(page, per_page))
    except MirrorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    output_runs(items, output, total=total)


async def _fetch_runs(page: int, per_page: int) -> tuple[int, list[RunStatus]]:
    async with create_http_client() as http:
        return await GitHubClient(http).list_runs(page=page, per_page=per_page)
