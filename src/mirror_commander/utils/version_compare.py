"""Release tag comparison utilities."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version


def parse_version(tag: str | None) -> Version | None:
    """Parse a release tag such as ``v1.4.0``, returning None on failure."""
    if not tag:
        return None
    candidate = tag.strip()
    if candidate[:1] in ("v", "V"):
        candidate = candidate[1:]
    try:
        return Version(candidate)
    except InvalidVersion:
        return None


def classify_update(current: str, latest: str) -> str:
    """Name the release component that moved between two tags.

    One of "major", "minor", "patch", "up-to-date" or "unknown" when either
    tag does not parse.
    """
    installed, newest = parse_version(current), parse_version(latest)
    if installed is None or newest is None:
        return "unknown"
    if newest <= installed:
        return "up-to-date"

    for label, old, new in (
        ("major", installed.major, newest.major),
        ("minor", installed.minor, newest.minor),
    ):
        if new > old:
            return label
    return "patch"
