"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _default_proxy() -> str | None:
    """Return the outbound proxy for registry and GitHub calls, if any.

    MCOM_PROXY wins over the usual HTTPS_PROXY variable.
    """
    return os.environ.get("MCOM_PROXY") or os.environ.get("HTTPS_PROXY") or None


@dataclass
class Settings:
    github_token: str = field(default_factory=lambda: _env("GITHUB_TOKEN"))
    github_api_url: str = field(default_factory=lambda: _env("MCOM_GITHUB_API_URL", "https://api.github.com"))
    transfer_repo: str = field(default_factory=lambda: _env("MCOM_TRANSFER_REPO", "myDockerHub"))
    workflow_path: str = ".github/workflows/docker-publish.yml"
    dispatch_event: str = "startTransfer"
    region: str = field(default_factory=lambda: _env("MCOM_REGION", "cn-north-4"))
    registry_host_template: str = field(
        default_factory=lambda: _env("MCOM_REGISTRY_HOST", "swr.{region}.myhuaweicloud.com")
    )
    registry_username: str = field(default_factory=lambda: _env("HUAWEICLOUD_USERNAME"))
    registry_password: str = field(default_factory=lambda: _env("HUAWEICLOUD_PASSWORD"))
    poll_interval: float = field(default_factory=lambda: _env_float("MCOM_POLL_INTERVAL", 5.0))
    http_timeout: float = field(default_factory=lambda: _env_float("MCOM_HTTP_TIMEOUT", 30.0))
    proxy: str | None = field(default_factory=_default_proxy)
    update_repo: str = field(default_factory=lambda: _env("MCOM_UPDATE_REPO"))
    user_agent: str = "mirror-commander/0.1"

    @property
    def has_registry_credentials(self) -> bool:
        return bool(self.registry_username and self.registry_password)


# Global singleton
settings = Settings()
