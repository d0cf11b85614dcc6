"""Update check result."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class UpdateInfo:
    current_version: str
    latest_version: str
    update_type: str  # "major", "minor", "patch", "up-to-date", "unknown"

    @property
    def needs_update(self) -> bool:
        return self.update_type in ("major", "minor", "patch")
