"""Rich table builders for each command."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from mirror_commander.models.image import ValidationResult
from mirror_commander.models.run import RunStatus
from mirror_commander.output.themes import styled_conclusion


def run_list_table(runs: list[RunStatus], total: int | None = None) -> Table:
    title = "Transfer Runs" if total is None else f"Transfer Runs ({len(runs)} of {total})"
    table = Table(title=title, expand=True, show_lines=False)
    table.add_column("Run", justify="right", style="dim", no_wrap=True)
    table.add_column("Title", style="bold white")
    table.add_column("Result", no_wrap=True)
    table.add_column("Started", style="dim", no_wrap=True)
    table.add_column("Link", style="cyan", overflow="fold")

    for r in runs:
        table.add_row(
            str(r.run_id),
            r.display_title or "-",
            styled_conclusion(r.status, r.conclusion),
            r.created_short,
            r.html_url,
        )
    return table


def validation_panel(text: str, result: ValidationResult) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Input", text)
    if not result.is_valid:
        table.add_row("Result", f"[red]{result.error}[/red]")
        return Panel(table, title="[bold]Image Address[/bold]", border_style="red")

    table.add_row("Result", "[green]✓ valid[/green]")
    if result.parsed is not None:
        ref = result.parsed
        table.add_row("Registry", ref.registry)
        table.add_row("Repository", ref.repository)
        tag = ref.tag + (" [dim](default)[/dim]" if result.tag_defaulted else "")
        table.add_row("Tag", tag)
        table.add_row("Digest", ref.digest or "-")
        table.add_row("Address", ref.full_address)
    return Panel(table, title="[bold]Image Address[/bold]", border_style="green")
