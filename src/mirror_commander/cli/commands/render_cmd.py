"""mcom render <source> - Print the transfer workflow for an image."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax

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
from mirror_commander.core.workflow_generator import render_workflow, target_reference
from mirror_commander.models.run import Credentials
from mirror_commander.utils.validation import parse_image_address, validate_tag

app = typer.Typer()
console = Console()

MASKED = "********"


@app.callback(invoke_without_command=True)
def render(
    source: str = typer.Argument(help="Source image address"),
    namespace: str = NamespaceOption,
    repo: str = RepoOption,
    tag: Optional[str] = TagOption,
    source_type: str = SourceTypeOption,
    region: Optional[str] = RegionOption,
    show_credentials: bool = typer.Option(False, "--show-credentials", help="Do not mask the registry password"),
) -> None:
    """Render the workflow exactly as the mirror command would write it."""
    kind = parse_source_type(source_type)
    try:
        ref = parse_image_address(source, kind)
    except ReferenceValidationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    target_tag = (tag or ref.tag).strip()
    if not validate_tag(target_tag).is_valid:
        typer.echo(f"Invalid target tag: {target_tag}", err=True)
        raise typer.Exit(code=1)

    region = region or settings.region
    password = settings.registry_password if show_credentials else MASKED
    content = render_workflow(
        ref,
        target_reference(region, namespace, repo, target_tag),
        region,
        kind,
        Credentials(username=settings.registry_username, password=password),
    )
    console.print(Syntax(content, "yaml", theme="ansi_dark", background_color="default"))
