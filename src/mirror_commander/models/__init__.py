"""Data models for Mirror Commander."""

from __future__ import annotations

import enum


class SourceType(enum.Enum):
    DOCKERHUB = "dockerhub"
    GHCR = "ghcr"

    @property
    def display_name(self) -> str:
        if self is SourceType.GHCR:
            return "GitHub Container Registry"
        return "Docker Hub"

    @property
    def default_registry(self) -> str:
        if self is SourceType.GHCR:
            return "ghcr.io"
        return "docker.io"

    @classmethod
    def from_str(cls, s: str) -> SourceType:
        for member in cls:
            if member.value == s.lower():
                return member
        raise ValueError(f"Unknown source type: {s!r} (expected 'dockerhub' or 'ghcr')")


class Phase(enum.Enum):
    INITIAL = "initial"
    EXAMINING = "examining"
    CONFIRMING = "confirming"
    UPDATING = "updating"
    TRIGGERING = "triggering"
    CHECKING = "checking"
    COMPLETED = "completed"
    ERROR = "error"