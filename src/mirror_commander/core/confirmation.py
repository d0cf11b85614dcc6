"""User decision point for mirroring images from untrusted publishers."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

UNTRUSTED_SOURCE_MESSAGE = (
    "You are pulling an image that is not a Docker official image. "
    "Continuing may be risky. Do you want to continue?"
)


class ConfirmationGate:
    """A single confirm-or-cancel decision tied to one pipeline run.

    The first resolution wins; later calls are ignored and return False.
    """

    def __init__(self, message: str = UNTRUSTED_SOURCE_MESSAGE):
        self.message = message
        self._decision: bool | None = None

    @property
    def resolved(self) -> bool:
        return self._decision is not None

    @property
    def decision(self) -> bool | None:
        """True when confirmed, False when cancelled, None while pending."""
        return self._decision

    def confirm(self) -> bool:
        return self._resolve(True)

    def cancel(self) -> bool:
        return self._resolve(False)

    def _resolve(self, decision: bool) -> bool:
        if self._decision is not None:
            logger.debug("Confirmation already resolved (%s), ignoring", self._decision)
            return False
        self._decision = decision
        return True
