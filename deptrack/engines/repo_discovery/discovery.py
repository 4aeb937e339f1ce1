"""Turn organizations and explicit slugs into work items."""

from __future__ import annotations

from collections.abc import Iterable

import httpx
import structlog

from deptrack.core.github import parse_repo_slug
from deptrack.engines.dependency_scanner.models import RepositoryRef
from deptrack.engines.repo_discovery.github_client import GitHubClient
from deptrack.exceptions import DiscoveryError

log = structlog.get_logger("deptrack.discovery")


class RepositoryDiscovery:
    """Resolves the repositories to scan via the GitHub API."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def list_org_repositories(self, org: str) -> list[RepositoryRef]:
        """All repositories of *org*, following pagination to the end."""
        refs: list[RepositoryRef] = []
        try:
            async for item in self._client.get_paginated(f"/orgs/{org}/repos", {"type": "all"}):
                refs.append(_ref_from_api(item, fallback_org=org))
        except (httpx.HTTPError, ValueError) as exc:
            raise DiscoveryError(f"error listing repositories for {org}: {exc}") from exc
        log.info("discovery.org_listed", org=org, repositories=len(refs))
        return refs

    async def get_repository(self, slug: str) -> RepositoryRef:
        owner, name = parse_repo_slug(slug)
        try:
            item = await self._client.get(f"/repos/{owner}/{name}")
            return _ref_from_api(item, fallback_org=owner)
        except (httpx.HTTPError, ValueError) as exc:
            raise DiscoveryError(f"error looking up repository {owner}/{name}: {exc}") from exc


    async def discover(
        self,
        orgs: Iterable[str] = (),
        repos: Iterable[str] = (),
        *,
        name_filter: str = "",
        package_filter: str = "",
    ) -> list[RepositoryRef]:
        """Resolve *orgs* and *repos* into de-duplicated refs sorted by full name.

        *name_filter* keeps only repositories whose name contains it.
        *package_filter* is carried on every ref for the parse step.
        """
        found: list[RepositoryRef] = []
        for org in orgs:
            found.extend(await self.list_org_repositories(org))
        for slug in repos:
            found.append(await self.get_repository(slug))

        unique: dict[str, RepositoryRef] = {}
        for ref in found:
            if name_filter and name_filter not in ref.name:
                continue
            unique.setdefault(
                ref.full_name,
                RepositoryRef(org=ref.org, name=ref.name, package_filter=package_filter),
            )
        log.debug(
            "discovery.resolved",
            found=len(found),
            kept=len(unique),
            name_filter=name_filter or None,
        )
        return [unique[k] for k in sorted(unique)]


def _ref_from_api(item: dict, *, fallback_org: str) -> RepositoryRef:
    """Build a ref from a GitHub repository object (uses ``full_name`` when present).

    Raises ``ValueError`` when *item* is not a repository object.
    """
    if not isinstance(item, dict):
        raise ValueError(f"unexpected repository entry: {item!r}")
    full_name = item.get("full_name")
    if isinstance(full_name, str) and "/" in full_name:
        org, name = full_name.split("/", 1)
        return RepositoryRef(org=org, name=name)
    name = item.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"repository object without a name: {item.get('message', item)!r}")
    return RepositoryRef(org=fallback_org, name=name)
