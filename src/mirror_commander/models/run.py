"""Pipeline run and CI workflow models."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from mirror_commander.models import Phase, SourceType


class WriteOutcome(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class Credentials:
    username: str = ""
    password: str = ""


@dataclass
class RunStatus:
    status: str = ""
    conclusion: str | None = None
    run_id: int = 0
    html_url: str = ""
    created_at: str = ""
    display_title: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.status == "completed"

    @property
    def succeeded(self) -> bool:
        return self.is_terminal and self.conclusion == "success"

    @property
    def created_short(self) -> str:
        """Return a human-readable short timestamp."""
        raw = self.created_at
        if not raw:
            return ""
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            return dt.strftime("%Y-%m-%d %H:%M:%S")
        except (ValueError, AttributeError):
            return raw[:19] if len(raw) > 19 else raw

    @classmethod
    def from_dict(cls, d: dict) -> RunStatus:
        return cls(
            status=d.get("status") or "",
            conclusion=d.get("conclusion"),
            run_id=d.get("id", 0),
            html_url=d.get("html_url", ""),
            created_at=d.get("created_at", ""),
            display_title=d.get("display_title", ""),
        )


@dataclass
class PipelineRun:
    source_reference: str
    target_reference: str
    region: str
    source_type: SourceType
    phase: Phase = Phase.INITIAL
    last_error: str | None = None
