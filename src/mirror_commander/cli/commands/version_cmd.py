"""mcom version - Show version and check for updates."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from mirror_commander.config.settings import settings
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.core.http import create_http_client
from mirror_commander.core.update_checker import fetch_update_info, installed_version
from mirror_commander.models.update import UpdateInfo

app = typer.Typer()
console = Console()

_UPDATE_COLORS = {
    "major": "red bold",
    "minor": "yellow",
    "patch": "green",
}


@app.callback(invoke_without_command=True)
def version(
    check: bool = typer.Option(True, "--check/--no-check", help="Look for a newer release"),
) -> None:
    """Print the installed version; with MCOM_UPDATE_REPO set, compare it to the newest tag."""
    current = installed_version()
    console.print(f"mirror-commander [bold]{current}[/bold]")

    if not check or not settings.update_repo:
        return

    info = asyncio.run(_fetch(current))
    if info.needs_update:
        color = _UPDATE_COLORS.get(info.update_type, "yellow")
        console.print(f"[{color}]{info.update_type} update available: {info.latest_version}[/{color}]")
    elif info.update_type == "up-to-date":
        console.print("[green]Up to date[/green]")
    else:
        console.print("[dim]Could not determine the latest release.[/dim]")


async def _fetch(current: str) -> UpdateInfo:
    async with create_http_client() as http:
        return await fetch_update_info(GitHubClient(http), settings.update_repo, current)
