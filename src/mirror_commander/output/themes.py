"""Phase and run-conclusion color maps."""

from mirror_commander.models import Phase

PHASE_COLORS: dict[Phase, str] = {
    Phase.INITIAL: "dim",
    Phase.EXAMINING: "cyan",
    Phase.CONFIRMING: "yellow",
    Phase.UPDATING: "cyan",
    Phase.TRIGGERING: "cyan",
    Phase.CHECKING: "blue",
    Phase.COMPLETED: "green",
    Phase.ERROR: "red bold",
}

PHASE_LABELS: dict[Phase, str] = {
    Phase.EXAMINING: "Checking source image…",
    Phase.CONFIRMING: "Waiting for confirmation…",
    Phase.UPDATING: "Updating workflow file…",
    Phase.TRIGGERING: "Triggering workflow…",
    Phase.CHECKING: "Running workflow…",
    Phase.COMPLETED: "Tag created successfully!",
    Phase.ERROR: "Creation failed",
}

CONCLUSION_COLORS: dict[str, str] = {
    "success": "green",
    "failure": "red bold",
    "cancelled": "dim",
    "timed_out": "red",
    "skipped": "dim",
}


def phase_label(phase: Phase) -> str:
    return PHASE_LABELS.get(phase, "Processing…")


def styled_phase(phase: Phase) -> str:
    color = PHASE_COLORS.get(phase, "white")
    return f"[{color}]{phase_label(phase)}[/{color}]"


def styled_conclusion(status: str, conclusion: str | None) -> str:
    if status != "completed":
        return f"[yellow]{status or 'unknown'}[/yellow]"
    value = conclusion or "unknown"
    color = CONCLUSION_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"
