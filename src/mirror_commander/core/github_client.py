"""GitHub REST API wrapper for the transfer repository and its workflow."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from mirror_commander.config.settings import settings
from mirror_commander.core.errors import ConfigError, TransportError
from mirror_commander.models.run import RunStatus, WriteOutcome

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
TRANSFER_REPO_DESCRIPTION = "Transfer repository for mirrored container images"


class GitHubClient:
    """Thin async wrapper around the GitHub REST endpoints the pipeline needs.

    Implements the pipeline backend: write the workflow definition, dispatch
    a run and report the latest run's status.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str | None = None,
        repo: str | None = None,
        workflow_path: str | None = None,
        api_url: str | None = None,
    ):
        self._http = http
        self.token = token if token is not None else settings.github_token
        self.repo = repo or settings.transfer_repo
        self.workflow_path = workflow_path or settings.workflow_path
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self._username: str | None = None
        # Newest run id seen before the last dispatch; older runs are not ours.
        self._baseline_run_id: int | None = None

    def _headers(self) -> dict[str, str]:
        if not self.token:
            raise ConfigError("GitHub token is not set; export GITHUB_TOKEN")
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": GITHUB_ACCEPT,
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        error: str,
        expected: tuple[int, ...] = (200,),
        **kwargs: Any,
    ) -> httpx.Response:
        url = f"{self.api_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(method, url, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            raise TransportError(f"{error}: {e}") from e
        if response.status_code not in expected:
            logger.debug("%s %s -> %d: %s", method, url, response.status_code, response.text[:200])
            raise TransportError(f"{error} (HTTP {response.status_code})", status_code=response.status_code)
        return response

    async def get_username(self) -> str:
        if self._username is None:
            response = await self._request("GET", "/user", error="Failed to fetch GitHub user")
            self._username = response.json()["login"]
        return self._username

    async def _repo_path(self) -> str:
        return f"/repos/{await self.get_username()}/{self.repo}"

    async def get_repository(self) -> dict | None:
        response = await self._request(
            "GET", await self._repo_path(),
            error="Failed to fetch transfer repository", expected=(200, 404),
        )
        if response.status_code == 404:
            return None
        return response.json()

    async def create_repository(self) -> dict:
        response = await self._request(
            "POST", "/user/repos",
            error="Failed to create transfer repository", expected=(201,),
            json={
                "name": self.repo,
                "private": True,
                "auto_init": True,
                "description": TRANSFER_REPO_DESCRIPTION,
            },
        )
        return response.json()

    async def ensure_repository(self) -> bool:
        """Create the private transfer repository if missing. True when created."""
        if await self.get_repository() is not None:
            return False
        await self.create_repository()
        logger.info("Created transfer repository %s", self.repo)
        return True

    async def get_file(self, path: str | None = None) -> tuple[str, str] | None:
        """Return (content, sha) of a repository file, or None if absent."""
        response = await self._request(
            "GET", f"{await self._repo_path()}/contents/{path or self.workflow_path}",
            error="Failed to fetch workflow file", expected=(200, 404),
        )
        if response.status_code == 404:
            return None
        data = response.json()
        content = base64.b64decode(data.get("content", "")).decode("utf-8")
        return content, data["sha"]

    async def write_definition(self, content: str, message: str) -> WriteOutcome:
        """Create or replace the workflow file.

        The current blob sha is sent back with an update, so GitHub rejects
        the write if someone changed the file in between.
        """
        existing = await self.get_file()
        if existing is not None and existing[0] == content:
            logger.debug("Workflow definition unchanged, skipping write")
            return WriteOutcome.UNCHANGED

        body: dict[str, str] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if existing is not None:
            body["sha"] = existing[1]

        await self._request(
            "PUT", f"{await self._repo_path()}/contents/{self.workflow_path}",
            error="Failed to update workflow file", expected=(200, 201), json=body,
        )
        return WriteOutcome.UPDATED if existing is not None else WriteOutcome.CREATED

    async def trigger_run(self, event_type: str | None = None) -> None:
        """Dispatch the transfer workflow.

        The newest existing run is remembered first, so ``latest_run`` never
        reports a run that finished before this dispatch was registered.
        """
        self._baseline_run_id = None
        previous = await self.latest_run()
        await self._request(
            "POST", f"{await self._repo_path()}/dispatches",
            error="Failed to trigger workflow", expected=(204,),
            json={"event_type": event_type or settings.dispatch_event},
        )
        self._baseline_run_id = previous.run_id if previous is not None else 0

    async def list_runs(self, page: int = 1, per_page: int = 10) -> tuple[int, list[RunStatus]]:
        """Return (total_count, runs) of dispatched transfer runs, newest first."""
        response = await self._request(
            "GET", f"{await self._repo_path()}/actions/runs",
            error="Failed to list workflow runs",
            params={"event": "repository_dispatch", "page": page, "per_page": per_page},
        )
        data = response.json()
        runs = [RunStatus.from_dict(r) for r in data.get("workflow_runs", [])]
        return data.get("total_count", len(runs)), runs

    async def latest_run(self) -> RunStatus | None:
        _, runs = await self.list_runs(page=1, per_page=1)
        if not runs:
            return None
        run = runs[0]
        if self._baseline_run_id is not None and run.run_id <= self._baseline_run_id:
            logger.debug("Run %d predates the last dispatch, waiting for a new one", run.run_id)
            return None
        return run

    async def latest_tag(self, repo: str) -> str | None:
        """Newest tag name of ``owner/name``, or None when it has no tags."""
        response = await self._request("GET", f"/repos/{repo}/tags", error="Failed to fetch tags")
        tags = response.json()
        if not tags:
            return None
        return tags[0].get("name")
