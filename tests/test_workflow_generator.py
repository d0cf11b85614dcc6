"""Tests for transfer workflow rendering."""

import yaml

from mirror_commander.models import SourceType
from mirror_commander.models.image import ImageReference
from mirror_commander.models.run import Credentials
from mirror_commander.core.workflow_generator import (
    login_username,
    registry_host,
    render_workflow,
    target_reference,
)

TEMPLATE = "swr.{region}.myhuaweicloud.com"
NGINX = ImageReference(registry="docker.io", repository="nginx", tag="alpine")
GHCR_APP = ImageReference(registry="ghcr.io", repository="owner/app", tag="v1")
TARGET = "swr.cn-north-4.myhuaweicloud.com/team/nginx:alpine"


def _render(source=NGINX, source_type=SourceType.DOCKERHUB, credentials=None):
    return render_workflow(
        source,
        TARGET,
        "cn-north-4",
        source_type,
        credentials or Credentials(username="account@AKEXAMPLE", password="s3cret"),
        event_type="startTransfer",
        registry_template=TEMPLATE,
    )


def test_rendering_is_deterministic():
    assert _render() == _render()


def test_four_ordered_steps():
    workflow = yaml.safe_load(_render())
    steps = workflow["jobs"]["docker"]["steps"]

    assert [s.get("run") for s in steps] == [
        "docker pull nginx:alpine",
        None,
        f"docker tag nginx:alpine {TARGET}",
        f"docker push {TARGET}",
    ]
    assert steps[0]["name"] == "Pull Docker image from Docker Hub"
    assert steps[1]["uses"] == "docker/login-action@v3"


def test_triggers():
    workflow = yaml.safe_load(_render())
    assert workflow["on"]["repository_dispatch"] == {"types": ["startTransfer"]}
    assert "workflow_dispatch" in workflow["on"]


def test_login_uses_region_host_and_credentials():
    login = yaml.safe_load(_render())["jobs"]["docker"]["steps"][1]["with"]
    assert login == {
        "registry": "swr.cn-north-4.myhuaweicloud.com",
        "username": "cn-north-4@AKEXAMPLE",
        "password": "s3cret",
    }


def test_ghcr_source_is_prefixed():
    steps = yaml.safe_load(_render(GHCR_APP, SourceType.GHCR))["jobs"]["docker"]["steps"]
    assert steps[0]["name"] == "Pull Docker image from GitHub Container Registry"
    assert steps[0]["run"] == "docker pull ghcr.io/owner/app:v1"
    assert steps[2]["run"] == f"docker tag ghcr.io/owner/app:v1 {TARGET}"


def test_inputs_change_output():
    other = ImageReference(registry="docker.io", repository="nginx", tag="1.25")
    assert _render(other) != _render()


def test_registry_host():
    assert registry_host("ap-southeast-1", TEMPLATE) == "swr.ap-southeast-1.myhuaweicloud.com"


def test_target_reference_placeholder():
    assert target_reference("cn-north-4", "team", "app", "", TEMPLATE) == (
        "swr.cn-north-4.myhuaweicloud.com/team/app:[tag]"
    )
    assert target_reference("cn-north-4", "team", "app", "v1", TEMPLATE).endswith("/team/app:v1")


def test_login_username():
    assert login_username("cn-east-3@AK123", "cn-north-4") == "cn-north-4@AK123"
    assert login_username("plainuser", "cn-north-4") == "plainuser"
