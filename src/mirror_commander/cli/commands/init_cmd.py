"""mcom init - Create the transfer repository on GitHub."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from mirror_commander.core.errors import MirrorError
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.core.http import create_http_client

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def init() -> None:
    """Make sure the private repository that hosts the transfer workflow exists."""
    try:
        repo, created = asyncio.run(_ensure_repository())
    except MirrorError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    if created:
        console.print(f"[green]Created private repository[/green] [bold]{repo}[/bold]")
    else:
        console.print(f"[dim]Repository {repo} already exists.[/dim]")


async def _ensure_repository() -> tuple[str, bool]:
    async with create_http_client() as http:
        client = GitHubClient(http)
        created = await client.ensure_repository()
        return f"{await client.get_username()}/{client.repo}", created
