"""Compare the installed release against the newest upstream tag."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version

from mirror_commander.core.errors import MirrorError
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.models.update import UpdateInfo
from mirror_commander.utils.version_compare import classify_update

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "mirror-commander"


def installed_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"


def check_for_update(current: str, latest: str | None) -> UpdateInfo:
    """Classify the gap between the installed version and the newest tag."""
    if not latest:
        return UpdateInfo(current_version=current, latest_version="", update_type="unknown")
    return UpdateInfo(
        current_version=current,
        latest_version=latest,
        update_type=classify_update(current, latest),
    )


async def fetch_update_info(client: GitHubClient, repo: str, current: str | None = None) -> UpdateInfo:
    """Look up the newest tag of ``repo``; lookup failures report "unknown"."""
    current = current or installed_version()
    try:
        latest = await client.latest_tag(repo)
    except MirrorError as e:
        logger.debug("Update check against %s failed: %s", repo, e)
        latest = None
    return check_for_update(current, latest)
