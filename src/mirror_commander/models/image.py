"""Image reference models."""

from __future__ import annotations

from dataclasses import dataclass

DOCKER_HUB_REGISTRY = "docker.io"
DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class ImageReference:
    registry: str
    repository: str
    tag: str = DEFAULT_TAG
    digest: str | None = None

    @property
    def full_address(self) -> str:
        """Canonical text form; the default Docker Hub registry is left implicit."""
        address = self.repository
        if self.registry != DOCKER_HUB_REGISTRY:
            address = f"{self.registry}/{address}"
        address = f"{address}:{self.tag}"
        if self.digest:
            address = f"{address}@{self.digest}"
        return address

    @property
    def namespace(self) -> str:
        """First path component, `library` for single-component Docker Hub names."""
        if "/" in self.repository:
            return self.repository.split("/", 1)[0]
        return "library"

    @property
    def name(self) -> str:
        return self.repository.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: str | None = None
    parsed: ImageReference | None = None
    tag_defaulted: bool = False

    @classmethod
    def ok(cls, parsed: ImageReference | None = None, tag_defaulted: bool = False) -> ValidationResult:
        return cls(is_valid=True, parsed=parsed, tag_defaulted=tag_defaulted)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(is_valid=False, error=error)


@dataclass(frozen=True)
class SourceAutofill:
    """What the form writes back after normalizing the source field."""

    source: str
    target_tag: str
    tag_defaulted: bool
