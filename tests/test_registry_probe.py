"""Tests for registry existence checks."""

import httpx
import pytest

from mirror_commander.core.registry_probe import RegistryProber
from mirror_commander.models import SourceType
from mirror_commander.models.existence import Found, NotFound, Unknown


def _client(responses, calls):
    """Mock client answering with the queued (status, body) pairs in order."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status, body = responses.pop(0)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGhcr:
    @pytest.mark.asyncio
    async def test_found(self):
        calls = []
        async with _client([(200, "")], calls) as http:
            result = await RegistryProber(http).probe("owner/app:v1", SourceType.GHCR)
        assert result == Found(trusted=True)
        assert calls[0].method == "HEAD"
        assert str(calls[0].url) == "https://ghcr.io/v2/owner/app/manifests/v1"

    @pytest.mark.asyncio
    async def test_not_found(self):
        calls = []
        async with _client([(404, "")], calls) as http:
            result = await RegistryProber(http).probe("ghcr.io/owner/app", SourceType.GHCR)
        assert result == NotFound()
        assert calls[0].url.path == "/v2/owner/app/manifests/latest"

    @pytest.mark.asyncio
    async def test_unauthorized_counts_as_found(self):
        calls = []
        async with _client([(401, "")], calls) as http:
            result = await RegistryProber(http).probe("owner/private", SourceType.GHCR)
        assert result.exists
        assert result.trusted

    @pytest.mark.asyncio
    async def test_falls_back_to_get(self):
        calls = []
        async with _client([(405, ""), (200, "{}")], calls) as http:
            result = await RegistryProber(http).probe("owner/app", SourceType.GHCR)
        assert result == Found(trusted=True)
        assert [c.method for c in calls] == ["HEAD", "GET"]

    @pytest.mark.asyncio
    async def test_unexpected_status_is_unknown(self):
        calls = []
        async with _client([(500, ""), (503, "")], calls) as http:
            result = await RegistryProber(http).probe("owner/app", SourceType.GHCR)
        assert isinstance(result, Unknown)
        assert "503" in result.reason
        assert not result.exists

    @pytest.mark.asyncio
    async def test_wrong_depth_skips_network(self):
        calls = []
        async with _client([], calls) as http:
            result = await RegistryProber(http).probe("owner/app/extra", SourceType.GHCR)
        assert result == NotFound()
        assert calls == []


class TestDockerHub:
    @pytest.mark.asyncio
    async def test_official_image(self):
        calls = []
        async with _client([(200, {"name": "alpine"})], calls) as http:
            result = await RegistryProber(http).probe("nginx:alpine", SourceType.DOCKERHUB)
        assert result == Found(trusted=True)
        assert calls[0].url.path == "/v2/namespaces/library/repositories/nginx/tags/alpine"

    @pytest.mark.asyncio
    async def test_community_image_is_untrusted(self):
        calls = []
        async with _client([(200, {"name": "7.2"})], calls) as http:
            result = await RegistryProber(http).probe("docker pull bitnami/redis:7.2", SourceType.DOCKERHUB)
        assert result == Found(trusted=False)
        assert calls[0].url.path == "/v2/namespaces/bitnami/repositories/redis/tags/7.2"

    @pytest.mark.asyncio
    async def test_missing_tag(self):
        calls = []
        async with _client([(404, {"message": "not found"})], calls) as http:
            result = await RegistryProber(http).probe("nginx:nope", SourceType.DOCKERHUB)
        assert result == NotFound()

    @pytest.mark.asyncio
    async def test_rate_limited_is_unknown(self):
        calls = []
        async with _client([(429, "")], calls) as http:
            result = await RegistryProber(http).probe("nginx", SourceType.DOCKERHUB)
        assert isinstance(result, Unknown)
        assert "429" in result.reason

    @pytest.mark.asyncio
    async def test_undecodable_body_is_unknown(self):
        calls = []
        async with _client([(200, "<html>captive portal</html>")], calls) as http:
            result = await RegistryProber(http).probe("nginx", SourceType.DOCKERHUB)
        assert isinstance(result, Unknown)

    @pytest.mark.asyncio
    async def test_other_registry_is_unknown(self):
        calls = []
        async with _client([], calls) as http:
            result = await RegistryProber(http).probe("quay.io/coreos/etcd:v3.5.0", SourceType.DOCKERHUB)
        assert isinstance(result, Unknown)
        assert calls == []


@pytest.mark.asyncio
async def test_connection_error_collapses_to_unknown():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        result = await RegistryProber(http).probe("nginx", SourceType.DOCKERHUB)
    assert isinstance(result, Unknown)
    assert result.exists is False
    assert result.trusted is False


@pytest.mark.asyncio
async def test_malformed_reference_is_not_found():
    async with _client([], []) as http:
        result = await RegistryProber(http).probe("Nginx", SourceType.DOCKERHUB)
    assert result == NotFound()
