"""Registry existence check results.

One of three variants: the tag was found (with a trust flag), it was
definitely not found, or the registry could not give an answer.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Found:
    trusted: bool = True

    @property
    def exists(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    @property
    def exists(self) -> bool:
        return False

    @property
    def trusted(self) -> bool:
        return False


@dataclass(frozen=True)
class Unknown:
    reason: str = ""

    @property
    def exists(self) -> bool:
        return False

    @property
    def trusted(self) -> bool:
        return False


ExistenceCheck = Found | NotFound | Unknown
