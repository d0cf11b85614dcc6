"""Source image existence checks against Docker Hub and GHCR."""

from __future__ import annotations

import json
import logging

import httpx

from mirror_commander.core.errors import ReferenceValidationError
from mirror_commander.models import SourceType
from mirror_commander.models.existence import ExistenceCheck, Found, NotFound, Unknown
from mirror_commander.models.image import DOCKER_HUB_REGISTRY, ImageReference
from mirror_commander.utils.validation import clean_address, parse_image_address

logger = logging.getLogger(__name__)

GHCR_API_URL = "https://ghcr.io/v2"
DOCKER_HUB_API_URL = "https://hub.docker.com/v2"
OFFICIAL_NAMESPACE = "library"

_MANIFEST_ACCEPT = ", ".join((
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.oci.image.manifest.v1+json",
))


class RegistryProber:
    """Asks the source registry whether an image tag exists.

    Never raises for registry or network trouble: those become ``Unknown``
    so the pipeline can report the source as not found.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        ghcr_api_url: str = GHCR_API_URL,
        docker_hub_api_url: str = DOCKER_HUB_API_URL,
    ):
        self._http = http
        self._ghcr_api_url = ghcr_api_url.rstrip("/")
        self._docker_hub_api_url = docker_hub_api_url.rstrip("/")

    async def probe(self, image_address: str, source_type: SourceType) -> ExistenceCheck:
        try:
            if source_type is SourceType.GHCR:
                return await self._probe_ghcr(image_address)
            return await self._probe_docker_hub(image_address)
        except ReferenceValidationError as e:
            logger.warning("Not probing malformed reference %r: %s", image_address, e)
            return NotFound()
        except (httpx.RequestError, json.JSONDecodeError) as e:
            logger.warning("Existence check for %r failed: %s", image_address, e, exc_info=True)
            return Unknown(reason=str(e) or type(e).__name__)

    async def _probe_ghcr(self, image_address: str) -> ExistenceCheck:
        address = clean_address(image_address, SourceType.GHCR)
        if len(address.split("/")) != 2:
            return NotFound()

        ref = parse_image_address(address, SourceType.GHCR)
        url = f"{self._ghcr_api_url}/{ref.repository}/manifests/{ref.tag}"
        headers = {"Accept": _MANIFEST_ACCEPT}

        logger.debug("HEAD %s", url)
        response = await self._http.head(url, headers=headers)
        check = _ghcr_status(response.status_code)
        if check is not None:
            return check

        # Some registry fronts reject HEAD; retry once with GET.
        logger.debug("HEAD %s returned %d, retrying with GET", url, response.status_code)
        response = await self._http.get(url, headers=headers)
        check = _ghcr_status(response.status_code)
        if check is not None:
            return check
        return Unknown(reason=f"registry responded with status {response.status_code}")

    async def _probe_docker_hub(self, image_address: str) -> ExistenceCheck:
        """Look the tag up on Docker Hub.

        Trust is decided from the namespace alone: only Docker official
        images (``library/...``) are trusted. Verified-publisher and
        sponsored namespaces such as ``bitnami`` are reported untrusted, so
        they go through the confirmation prompt as well.
        """
        ref = parse_image_address(image_address, SourceType.DOCKERHUB)
        if ref.registry != DOCKER_HUB_REGISTRY:
            return Unknown(reason=f"{ref.registry} is not a Docker Hub registry")

        url = _docker_hub_tag_url(self._docker_hub_api_url, ref)
        logger.debug("GET %s", url)
        response = await self._http.get(url)

        if response.status_code == 200:
            # Validate the body; a proxy error page should not count as a hit.
            response.json()
            return Found(trusted=ref.namespace == OFFICIAL_NAMESPACE)
        if response.status_code == 404:
            return NotFound()
        return Unknown(reason=f"registry responded with status {response.status_code}")


def _ghcr_status(status_code: int) -> ExistenceCheck | None:
    if status_code == 200:
        return Found(trusted=True)
    if status_code == 404:
        return NotFound()
    if status_code == 401:
        # Private or anonymous-token-required packages answer 401.
        return Found(trusted=True)
    return None


def _docker_hub_tag_url(base_url: str, ref: ImageReference) -> str:
    name = ref.name
    if "/" in ref.repository:
        # Hub repositories are namespace/name; deeper paths keep the rest in the name.
        name = ref.repository.split("/", 1)[1]
    return f"{base_url}/namespaces/{ref.namespace}/repositories/{name}/tags/{ref.tag}"
