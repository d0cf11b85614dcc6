"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from mirror_commander.models.image import ValidationResult
from mirror_commander.models.run import RunStatus

console = Console()


def _run_to_dict(r: RunStatus) -> dict[str, Any]:
    return {
        "id": r.run_id,
        "title": r.display_title,
        "status": r.status,
        "conclusion": r.conclusion,
        "created": r.created_at,
        "url": r.html_url,
    }


def _validation_to_dict(text: str, result: ValidationResult) -> dict[str, Any]:
    data: dict[str, Any] = {
        "input": text,
        "valid": result.is_valid,
        "error": result.error,
    }
    if result.parsed is not None:
        ref = result.parsed
        data["parsed"] = {
            "registry": ref.registry,
            "repository": ref.repository,
            "tag": ref.tag,
            "digest": ref.digest,
            "full_address": ref.full_address,
        }
        data["tag_defaulted"] = result.tag_defaulted
    return data


def output_runs(runs: list[RunStatus], fmt: str, total: int | None = None) -> None:
    if fmt == "json":
        data = [_run_to_dict(r) for r in runs]
        console.print_json(json.dumps(data, indent=2))
    elif fmt == "yaml":
        data = [_run_to_dict(r) for r in runs]
        console.print(yaml.dump(data, default_flow_style=False))
    else:
        from mirror_commander.output.tables import run_list_table
        console.print(run_list_table(runs, total=total))


def output_validation(text: str, result: ValidationResult, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(_validation_to_dict(text, result), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(_validation_to_dict(text, result), default_flow_style=False, sort_keys=False))
    else:
        from mirror_commander.output.tables import validation_panel
        console.print(validation_panel(text, result))
