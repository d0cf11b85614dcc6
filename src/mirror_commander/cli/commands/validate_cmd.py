"""mcom validate <address> - Validate a source image address."""

from __future__ import annotations

import typer

from mirror_commander.cli.options import OutputOption, SourceTypeOption, parse_source_type
from mirror_commander.models import SourceType
from mirror_commander.output.formatters import output_validation
from mirror_commander.utils.validation import validate_image_address, validation_hint

app = typer.Typer()


@app.callback(invoke_without_command=True)
def validate(
    address: str = typer.Argument(help="Image address or 'docker pull ...' command"),
    output: str = OutputOption,
    source_type: str = SourceTypeOption,
) -> None:
    """Parse an image address the way the mirror command will."""
    kind = parse_source_type(source_type)
    result = validate_image_address(address, kind)
    output_validation(address, result, output)

    if not result.is_valid:
        if output == "table":
            hint = validation_hint("ghcr_image" if kind is SourceType.GHCR else "image")
            typer.echo(hint, err=True)
        raise typer.Exit(code=1)
