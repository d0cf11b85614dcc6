"""mcom mirror <source> - Mirror a source image into the target registry."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console

from mirror_commander.cli.options import (
    NamespaceOption,
    RegionOption,
    RepoOption,
    SourceTypeOption,
    TagOption,
    parse_source_type,
)
from mirror_commander.config.settings import settings
from mirror_commander.core.errors import ReferenceValidationError
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.core.http import create_http_client
from mirror_commander.core.pipeline_driver import PipelineDriver
from mirror_commander.core.registry_probe import RegistryProber
from mirror_commander.core.workflow_generator import target_reference
from mirror_commander.models import Phase, SourceType
from mirror_commander.models.run import Credentials
from mirror_commander.output.themes import phase_label, styled_phase
from mirror_commander.utils.validation import autofill_source, validate_image_address, validate_tag

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def mirror(
    source: str = typer.Argument(help="Source image, e.g. nginx:alpine or 'docker pull nginx:alpine'"),
    namespace: str = NamespaceOption,
    repo: str = RepoOption,
    tag: Optional[str] = TagOption,
    source_type: str = SourceTypeOption,
    region: Optional[str] = RegionOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Continue without asking when the source is not official"),
    detach: bool = typer.Option(False, "--detach", help="Return as soon as the workflow run has started"),
) -> None:
    """Check the source image, update the transfer workflow, run it and wait for the result."""
    kind = parse_source_type(source_type)

    fill = autofill_source(source, kind)
    if fill is None:
        typer.echo(validate_image_address(source, kind).error, err=True)
        raise typer.Exit(code=1)

    target_tag = (tag or fill.target_tag).strip()
    tag_check = validate_tag(target_tag)
    if not tag_check.is_valid:
        typer.echo(f"Invalid target tag: {tag_check.error}", err=True)
        raise typer.Exit(code=1)

    if not settings.has_registry_credentials:
        typer.echo("Target registry credentials are not set; export HUAWEICLOUD_USERNAME and HUAWEICLOUD_PASSWORD.",
                   err=True)
        raise typer.Exit(code=1)
    if not settings.github_token:
        typer.echo("GitHub token is not set; export GITHUB_TOKEN.", err=True)
        raise typer.Exit(code=1)

    region = region or settings.region
    console.print(f"Source:  [magenta]{fill.source}[/magenta]")
    console.print(f"Target:  [bold]{target_reference(region, namespace, repo, target_tag)}[/bold]")

    phase, error = asyncio.run(
        _run_mirror(fill.source, kind, namespace, repo, target_tag, region, yes=yes, detach=detach)
    )

    if error:
        console.print(f"[red]{error}[/red]")
        raise typer.Exit(code=1)
    if phase is Phase.COMPLETED:
        console.print(f"\n[green]{phase_label(phase)}[/green]")
    elif phase is Phase.CHECKING:
        console.print("\n[cyan]Workflow is running.[/cyan] Follow it with [bold]mcom runs[/bold].")
    else:
        console.print("[dim]Cancelled.[/dim]")


async def _run_mirror(
    source: str,
    kind: SourceType,
    namespace: str,
    repo: str,
    tag: str,
    region: str,
    *,
    yes: bool,
    detach: bool,
) -> tuple[Phase, str | None]:
    credentials = Credentials(username=settings.registry_username, password=settings.registry_password)

    async with create_http_client() as http:
        with console.status("[bold cyan]Starting…") as status:
            driver = PipelineDriver(
                RegistryProber(http),
                GitHubClient(http),
                region,
                credentials,
                on_transition=lambda p: status.update(styled_phase(p)),
            )
            try:
                try:
                    phase = await driver.submit(source, kind, namespace, repo, tag)
                except ReferenceValidationError as e:
                    return driver.phase, str(e)

                if phase is Phase.CONFIRMING and driver.gate is not None:
                    status.stop()
                    accepted = yes or typer.confirm(driver.gate.message, default=False)
                    status.start()
                    phase = await driver.confirm() if accepted else driver.decline()

                if phase is Phase.CHECKING and not detach:
                    console.print("[dim]You can stop waiting at any time; the run continues on GitHub.[/dim]")
                    phase = await driver.wait()
            finally:
                driver.close()

    return phase, driver.last_error
