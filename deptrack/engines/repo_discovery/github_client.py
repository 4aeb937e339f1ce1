"""Async GitHub REST client used for repository discovery."""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import structlog

log = structlog.get_logger("deptrack.discovery")

DEFAULT_API_URL = "https://api.github.com"

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

_MAX_RATE_LIMIT_WAITS = 3


class GitHubClient:
    """Thin async wrapper around the two listing endpoints discovery needs.

    The token is passed in explicitly; the client never reads the environment.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_paginated(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        max_pages: int | None = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Yield JSON items from a paginated endpoint.

        Follows ``Link: <...>; rel="next"`` until no further page is
        indicated, or until *max_pages* pages when given. Raises
        ``httpx.HTTPError`` on failure and ``ValueError`` on a non-JSON body.
        """
        url: str | None = path
        params = dict(params or {})
        params.setdefault("per_page", 100)
        page = 0

        while url and (max_pages is None or page < max_pages):
            response = await self._request(url, params if page == 0 else None)
            data = response.json()
            if isinstance(data, list):
                for item in data:
                    yield item
            else:
                yield data

            url = self._parse_next_link(response.headers.get("Link", ""))
            page += 1

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Single-resource GET, returns parsed JSON."""
        response = await self._request(path, params)
        return response.json()

    # ── internal ───────────────────────────────────────────────────────────

    async def _request(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET that waits out rate limits; any other error status is raised."""
        for attempt in range(_MAX_RATE_LIMIT_WAITS + 1):
            resp = await self._client.get(url, params=params)
            if resp.status_code in (403, 429) and self._is_rate_limited(resp):
                if attempt == _MAX_RATE_LIMIT_WAITS:
                    break
                wait = self._get_rate_limit_wait(resp)
                log.warning("github.rate_limit", url=url, wait_seconds=wait, attempt=attempt + 1)
                await asyncio.sleep(wait)
                continue
            resp.raise_for_status()
            await self._check_rate_limit(resp)
            return resp
        resp.raise_for_status()
        return resp

    async def _check_rate_limit(self, response: httpx.Response) -> None:
        """Sleep until the rate limit resets if no requests remain."""
        remaining = self._parse_header_int(response.headers.get("X-RateLimit-Remaining"))
        if remaining == 0:
            wait = self._get_rate_limit_wait(response)
            log.warning("github.rate_limit_wait", wait_seconds=wait)
            await asyncio.sleep(wait)

    @classmethod
    def _is_rate_limited(cls, response: httpx.Response) -> bool:
        if cls._parse_header_int(response.headers.get("X-RateLimit-Remaining")) == 0:
            return True
        return "Retry-After" in response.headers

    @classmethod
    def _get_rate_limit_wait(cls, response: httpx.Response) -> int:
        retry_after = cls._parse_header_int(response.headers.get("Retry-After"))
        if retry_after is not None:
            return max(retry_after, 1)
        reset_ts = cls._parse_header_int(response.headers.get("X-RateLimit-Reset"))
        if reset_ts is not None:
            return max(reset_ts - int(time.time()), 1)
        return 60

    @staticmethod
    def _parse_header_int(value: str | None) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _parse_next_link(link_header: str) -> str | None:
        """Extract the ``next`` URL from a GitHub ``Link`` header."""
        match = _NEXT_LINK_RE.search(link_header)
        return match.group(1) if match else None
