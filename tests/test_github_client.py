"""Tests for the GitHub REST wrapper, against an in-memory fake API."""

import base64
import json

import httpx
import pytest
import pytest_asyncio

from mirror_commander.core.errors import ConfigError, TransportError
from mirror_commander.core.github_client import GitHubClient
from mirror_commander.models.run import WriteOutcome

API = "https://api.example.test"
WORKFLOW = ".github/workflows/docker-publish.yml"
CONTENTS = f"/repos/octo/transfer/contents/{WORKFLOW}"


class FakeGitHub:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.repo_exists = True
        self.files: dict[str, tuple[str, str]] = {}
        self.put_status = None
        self.dispatch_status = 204
        self.runs: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if path == "/user":
            return httpx.Response(200, json={"login": "octo"})
        if path == "/repos/octo/transfer" and method == "GET":
            return httpx.Response(200 if self.repo_exists else 404, json={"name": "transfer"})
        if path == "/user/repos" and method == "POST":
            self.repo_exists = True
            return httpx.Response(201, json=json.loads(request.content))
        if path == CONTENTS and method == "GET":
            if WORKFLOW not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            content, sha = self.files[WORKFLOW]
            encoded = base64.b64encode(content.encode()).decode()
            return httpx.Response(200, json={"content": encoded, "sha": sha})
        if path == CONTENTS and method == "PUT":
            if self.put_status:
                return httpx.Response(self.put_status, json={"message": "conflict"})
            body = json.loads(request.content)
            existed = WORKFLOW in self.files
            self.files[WORKFLOW] = (base64.b64decode(body["content"]).decode(), f"sha{len(self.requests)}")
            return httpx.Response(200 if existed else 201, json={})
        if path == "/repos/octo/transfer/dispatches":
            return httpx.Response(self.dispatch_status)
        if path == "/repos/octo/transfer/actions/runs":
            return httpx.Response(200, json={"total_count": len(self.runs), "workflow_runs": self.runs})
        if path == "/repos/acme/tool/tags":
            return httpx.Response(200, json=[{"name": "v2.0.0"}, {"name": "v1.9.0"}])
        return httpx.Response(500)

    def last(self, method: str) -> httpx.Request:
        return [r for r in self.requests if r.method == method][-1]


@pytest.fixture
def fake():
    return FakeGitHub()


@pytest_asyncio.fixture
async def client(fake):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as http:
        yield GitHubClient(http, token="ghp_test", repo="transfer", workflow_path=WORKFLOW, api_url=API)


class TestWriteDefinition:
    @pytest.mark.asyncio
    async def test_creates_missing_file(self, fake, client):
        outcome = await client.write_definition("name: ci\n", "nginx:latest")
        assert outcome is WriteOutcome.CREATED

        body = json.loads(fake.last("PUT").content)
        assert body["message"] == "nginx:latest"
        assert "sha" not in body
        assert base64.b64decode(body["content"]).decode() == "name: ci\n"

    @pytest.mark.asyncio
    async def test_update_sends_sha(self, fake, client):
        fake.files[WORKFLOW] = ("old\n", "abc123")
        outcome = await client.write_definition("new\n", "nginx:1.25")
        assert outcome is WriteOutcome.UPDATED
        assert json.loads(fake.last("PUT").content)["sha"] == "abc123"

    @pytest.mark.asyncio
    async def test_identical_content_is_not_rewritten(self, fake, client):
        fake.files[WORKFLOW] = ("same\n", "abc123")
        outcome = await client.write_definition("same\n", "nginx")
        assert outcome is WriteOutcome.UNCHANGED
        assert not [r for r in fake.requests if r.method == "PUT"]

    @pytest.mark.asyncio
    async def test_conflict_raises(self, fake, client):
        fake.files[WORKFLOW] = ("old\n", "stale")
        fake.put_status = 409
        with pytest.raises(TransportError) as exc:
            await client.write_definition("new\n", "nginx")
        assert exc.value.status_code == 409
        assert "HTTP 409" in str(exc.value)


class TestTrigger:
    @pytest.mark.asyncio
    async def test_dispatch_event(self, fake, client):
        await client.trigger_run("startTransfer")
        request = fake.last("POST")
        assert request.url.path == "/repos/octo/transfer/dispatches"
        assert json.loads(request.content) == {"event_type": "startTransfer"}
        assert request.headers["Authorization"] == "Bearer ghp_test"

    @pytest.mark.asyncio
    async def test_previous_run_is_not_reported(self, fake, client):
        fake.runs = [{"id": 41, "status": "completed", "conclusion": "success"}]
        await client.trigger_run("startTransfer")
        assert await client.latest_run() is None

        fake.runs = [{"id": 42, "status": "queued"}] + fake.runs
        run = await client.latest_run()
        assert run.run_id == 42
        assert not run.is_terminal

    @pytest.mark.asyncio
    async def test_newest_run_read_before_dispatch(self, fake, client):
        await client.trigger_run("startTransfer")
        order = [(r.method, r.url.path.rsplit("/", 1)[-1]) for r in fake.requests if r.url.path != "/user"]
        assert order == [("GET", "runs"), ("POST", "dispatches")]

    @pytest.mark.asyncio
    async def test_rejected_dispatch(self, fake, client):
        fake.dispatch_status = 422
        with pytest.raises(TransportError):
            await client.trigger_run("startTransfer")


class TestRuns:
    @pytest.mark.asyncio
    async def test_latest_run(self, fake, client):
        fake.runs = [{"id": 7, "status": "completed", "conclusion": "success", "created_at": "2024-05-01T10:00:00Z"}]
        run = await client.latest_run()
        assert run.run_id == 7
        assert run.succeeded
        assert run.created_short == "2024-05-01 10:00:00"

        params = fake.last("GET").url.params
        assert params["event"] == "repository_dispatch"
        assert params["per_page"] == "1"

    @pytest.mark.asyncio
    async def test_no_runs_yet(self, client):
        assert await client.latest_run() is None

    @pytest.mark.asyncio
    async def test_list_runs_total(self, fake, client):
        fake.runs = [{"id": i, "status": "queued"} for i in range(3)]
        total, runs = await client.list_runs(page=1, per_page=10)
        assert total == 3
        assert [r.run_id for r in runs] == [0, 1, 2]
        assert not runs[0].is_terminal


class TestRepository:
    @pytest.mark.asyncio
    async def test_existing_repository_is_kept(self, fake, client):
        assert await client.ensure_repository() is False
        assert not [r for r in fake.requests if r.url.path == "/user/repos"]

    @pytest.mark.asyncio
    async def test_missing_repository_is_created_private(self, fake, client):
        fake.repo_exists = False
        assert await client.ensure_repository() is True
        body = json.loads(fake.last("POST").content)
        assert body["name"] == "transfer"
        assert body["private"] is True

    @pytest.mark.asyncio
    async def test_username_is_cached(self, fake, client):
        await client.trigger_run("a")
        await client.trigger_run("b")
        assert len([r for r in fake.requests if r.url.path == "/user"]) == 1


@pytest.mark.asyncio
async def test_latest_tag(client):
    assert await client.latest_tag("acme/tool") == "v2.0.0"


@pytest.mark.asyncio
async def test_missing_token(fake):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake)) as http:
        client = GitHubClient(http, token="", repo="transfer", api_url=API)
        with pytest.raises(ConfigError):
            await client.trigger_run("startTransfer")
    assert fake.requests == []


@pytest.mark.asyncio
async def test_network_error_becomes_transport_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GitHubClient(http, token="t", repo="transfer", api_url=API)
        with pytest.raises(TransportError, match="Failed to fetch GitHub user"):
            await client.get_username()
