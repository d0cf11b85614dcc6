"""Error types raised by the mirror pipeline and its adapters."""

from __future__ import annotations


class MirrorError(RuntimeError):
    """Raised when the mirror pipeline hits a known error condition."""


class ConfigError(MirrorError):
    """A required setting is missing or unusable."""


class ReferenceValidationError(MirrorError):
    """An image reference or tag failed local validation."""


class TransportError(MirrorError):
    """A registry or GitHub call failed or answered with an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RunFailureError(MirrorError):
    """The remote workflow run finished with a non-success conclusion."""

    def __init__(self, conclusion: str | None):
        super().__init__(f"workflow run failed: {conclusion}; see the build logs for details")
        self.conclusion = conclusion
