"""Render the GitHub Actions workflow that pulls, tags and pushes an image."""

from __future__ import annotations

import yaml

from mirror_commander.config.settings import settings
from mirror_commander.models import SourceType
from mirror_commander.models.image import ImageReference
from mirror_commander.models.run import Credentials

WORKFLOW_NAME = "Docker Image CI"
LOGIN_ACTION = "docker/login-action@v3"
TAG_PLACEHOLDER = "[tag]"


def registry_host(region: str, template: str | None = None) -> str:
    """Target registry host for a region, e.g. ``swr.cn-north-4.myhuaweicloud.com``."""
    return (template or settings.registry_host_template).format(region=region)


def target_reference(
    region: str,
    namespace: str,
    repository: str,
    tag: str | None,
    template: str | None = None,
) -> str:
    """The final target address shown to the user before submitting."""
    host = registry_host(region, template)
    return f"{host}/{namespace}/{repository}:{(tag or '').strip() or TAG_PLACEHOLDER}"


def login_username(username: str, region: str) -> str:
    """Registry login for a region.

    An ``account@suffix`` login is region specific: ``cn-north-4@suffix``.
    """
    if "@" in username:
        _, suffix = username.split("@", 1)
        return f"{region}@{suffix}"
    return username


def render_workflow(
    source: ImageReference,
    target: str,
    region: str,
    source_type: SourceType,
    credentials: Credentials,
    *,
    event_type: str | None = None,
    registry_template: str | None = None,
) -> str:
    """Render the transfer workflow.

    Output depends only on the arguments, so rendering twice with the same
    inputs yields identical text.
    """
    source_address = source.full_address
    steps = [
        {
            "name": f"Pull Docker image from {source_type.display_name}",
            "run": f"docker pull {source_address}",
        },
        {
            "name": "Login to target registry",
            "uses": LOGIN_ACTION,
            "with": {
                "registry": registry_host(region, registry_template),
                "username": login_username(credentials.username, region),
                "password": credentials.password,
            },
        },
        {
            "name": "Tag the image for the target registry",
            "run": f"docker tag {source_address} {target}",
        },
        {
            "name": "Push the image to the target registry",
            "run": f"docker push {target}",
        },
    ]
    workflow = {
        "name": WORKFLOW_NAME,
        "on": {
            "repository_dispatch": {"types": [event_type or settings.dispatch_event]},
            "workflow_dispatch": None,
        },
        "jobs": {
            "docker": {
                "runs-on": "ubuntu-latest",
                "steps": steps,
            },
        },
    }
    return yaml.safe_dump(workflow, sort_keys=False, default_flow_style=False, width=4096)
