"""Shared HTTP client construction."""

from __future__ import annotations

import httpx

from mirror_commander.config.settings import settings


def create_http_client(timeout: float | None = None, proxy: str | None = None) -> httpx.AsyncClient:
    """Build the async client used for registry and GitHub calls.

    One client per command invocation; close it with ``aclose()`` or use it
    as an async context manager.
    """
    return httpx.AsyncClient(
        timeout=settings.http_timeout if timeout is None else timeout,
        proxy=proxy or settings.proxy,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )
