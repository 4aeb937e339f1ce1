"""Manifest fetcher — one GET per repository against the raw-content host."""

from __future__ import annotations

import httpx
import structlog

from deptrack.engines.dependency_scanner.models import RepositoryRef
from deptrack.exceptions import ManifestNetworkError, ManifestNotFoundError

log = structlog.get_logger("deptrack.engine")

DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_BRANCH = "master"


def manifest_url(
    repository: RepositoryRef,
    manifest_path: str,
    *,
    branch: str = DEFAULT_BRANCH,
    raw_url: str = DEFAULT_RAW_URL,
) -> str:
    """``{raw_url}/{org}/{name}/{branch}/{manifest_path}``."""
    return f"{raw_url.rstrip('/')}/{repository.full_name}/{branch}/{manifest_path.lstrip('/')}"


class ManifestFetcher:
    """Downloads manifests. No retries: each repository gets a single attempt."""

    def __init__(
        self,
        *,
        branch: str = DEFAULT_BRANCH,
        raw_url: str = DEFAULT_RAW_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.branch = branch
        self.raw_url = raw_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ManifestFetcher:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch(self, repository: RepositoryRef, manifest_path: str) -> bytes:
        """Return the raw manifest body.

        Redirects are followed. Raises :class:`ManifestNetworkError` when the
        request or body decoding fails and :class:`ManifestNotFoundError` when
        the final status is not 200.
        """
        url = manifest_url(repository, manifest_path, branch=self.branch, raw_url=self.raw_url)
        try:
            async with self._client.stream("GET", url, follow_redirects=True) as resp:
                if resp.status_code != httpx.codes.OK:
                    log.debug(
                        "fetcher.not_found",
                        repository=repository.full_name,
                        url=url,
                        status=resp.status_code,
                    )
                    raise ManifestNotFoundError(url, resp.status_code)
                body = await resp.aread()
        except httpx.RequestError as exc:
            log.warning(
                "fetcher.network_error",
                repository=repository.full_name,
                url=url,
                error=str(exc),
            )
            raise ManifestNetworkError(f"failed to GET {url}: {exc!r}") from exc

        log.debug("fetcher.fetched", repository=repository.full_name, bytes=len(body))
        return body
