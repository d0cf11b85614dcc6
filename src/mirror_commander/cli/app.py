"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="mcom",
    help="Mirror Commander - Mirror public container images into a private registry.",
    no_args_is_help=True,
)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _register_commands() -> None:
    from mirror_commander.cli.commands.mirror_cmd import app as mirror_app
    from mirror_commander.cli.commands.validate_cmd import app as validate_app
    from mirror_commander.cli.commands.render_cmd import app as render_app
    from mirror_commander.cli.commands.runs_cmd import app as runs_app
    from mirror_commander.cli.commands.init_cmd import app as init_app
    from mirror_commander.cli.commands.version_cmd import app as version_app

    app.add_typer(mirror_app, name="mirror", help="Mirror a source image into the target registry")
    app.add_typer(validate_app, name="validate", help="Validate a source image address")
    app.add_typer(render_app, name="render", help="Print the transfer workflow for an image")
    app.add_typer(runs_app, name="runs", help="List recent transfer runs")
    app.add_typer(init_app, name="init", help="Create the transfer repository on GitHub")
    app.add_typer(version_app, name="version", help="Show version and check for updates")


_register_commands()


def main() -> None:
    app()
