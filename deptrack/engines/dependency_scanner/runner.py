"""DependencyTracker — orchestrates discovery, the worker pool and aggregation."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from deptrack.config import RunConfig
from deptrack.engines.dependency_scanner.aggregator import AggregateResult, aggregate
from deptrack.engines.dependency_scanner.fetcher import ManifestFetcher
from deptrack.engines.dependency_scanner.models import Failure, FetchOutcome, RepositoryRef
from deptrack.engines.dependency_scanner.pool import ProgressFn, WorkerPool
from deptrack.engines.dependency_scanner.registry import filter_dependencies, parse
from deptrack.engines.repo_discovery.discovery import RepositoryDiscovery
from deptrack.exceptions import NoRepositoriesError, RepositoryScanError

log = structlog.get_logger("deptrack.engine")


class DependencyTracker:
    """Runs one crawl: resolve repositories, scan each, aggregate the results."""

    def __init__(
        self,
        config: RunConfig,
        discovery: RepositoryDiscovery,
        fetcher: ManifestFetcher,
    ) -> None:
        self._config = config
        self._discovery = discovery
        self._fetcher = fetcher

    async def resolve_repositories(self) -> list[RepositoryRef]:
        """Discover, de-duplicate and apply ``limit``.

        Raises :class:`DiscoveryError` or :class:`NoRepositoriesError`.
        """
        cfg = self._config
        refs = await self._discovery.discover(
            cfg.orgs,
            cfg.repos,
            name_filter=cfg.name_filter,
            package_filter=cfg.package_filter,
        )
        if not refs:
            raise NoRepositoriesError("no repositories found")
        if cfg.limit and len(refs) > cfg.limit:
            log.info("tracker.limited", found=len(refs), limit=cfg.limit)
            refs = refs[: cfg.limit]
        return refs

    async def scan_repository(self, repository: RepositoryRef) -> FetchOutcome:
        """Fetch, parse and filter one manifest. Never raises for expected failures."""
        mode = self._config.mode
        try:
            raw = await self._fetcher.fetch(repository, mode.manifest_path)
            records = parse(mode.parser_format, raw)
        except RepositoryScanError as exc:
            log.debug(
                "tracker.repository_failed",
                repository=repository.full_name,
                kind=exc.kind.value,
                error=str(exc),
            )
            return FetchOutcome(
                repository=repository,
                failure=Failure(kind=exc.kind, message=str(exc)),
            )

        kept = filter_dependencies(records, repository.package_filter)
        log.debug(
            "tracker.repository_scanned",
            repository=repository.full_name,
            dependencies=len(records),
            kept=len(kept),
        )
        return FetchOutcome(repository=repository, dependencies=tuple(kept))

    async def scan(
        self,
        repositories: list[RepositoryRef],
        on_complete: ProgressFn | None = None,
    ) -> AggregateResult:
        """Run the worker pool over *repositories*, then aggregate (drain first)."""
        pool = WorkerPool(self.scan_repository, self._config.concurrency)
        outcomes = await pool.run(repositories, on_complete)
        result = aggregate(outcomes)
        log.info(
            "tracker.finished",
            repositories=len(repositories),
            succeeded=result.succeeded,
            failed=result.failed,
            dependencies=len(result.entries),
        )
        return result

    async def run(
        self,
        on_start: Callable[[int], ProgressFn | None] | None = None,
    ) -> AggregateResult:
        """Full pipeline. *on_start* receives the repository count and may return a progress callback."""
        repositories = await self.resolve_repositories()
        on_complete = on_start(len(repositories)) if on_start else None
        return await self.scan(repositories, on_complete)
