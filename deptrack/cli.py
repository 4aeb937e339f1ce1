"""CLI entry point: deptrack.

Examples:
    deptrack -o hashicorp -p golang.org/x
    deptrack -r terraform-providers/terraform-provider-aws --mode vendor -f deps.csv
    deptrack -o my-org -n service -l 20 -c 8 --show-errors
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from deptrack.config import DEFAULT_CONCURRENCY, RunConfig
from deptrack.core.logging import setup_logging
from deptrack.engines.dependency_scanner.aggregator import AggregateResult
from deptrack.engines.dependency_scanner.fetcher import ManifestFetcher
from deptrack.engines.dependency_scanner.modes import ScanMode
from deptrack.engines.dependency_scanner.runner import DependencyTracker
from deptrack.engines.repo_discovery import GitHubClient, RepositoryDiscovery
from deptrack.exceptions import ConfigError, DiscoveryError, NoRepositoriesError
from deptrack.progress import ProgressBar, ProgressCounter
from deptrack.report import summary_line, write_failures, write_report


async def _run(config: RunConfig, show_progress: bool) -> AggregateResult:
    bars: list[ProgressBar] = []

    def on_start(total: int) -> ProgressCounter:
        counter = ProgressCounter(total)
        bar = ProgressBar(total, disable=not show_progress)
        bars.append(bar)
        counter.callbacks.append(bar)
        return counter

    async with GitHubClient(
        config.token, base_url=config.api_url, timeout=config.timeout
    ) as client, ManifestFetcher(
        branch=config.branch, raw_url=config.raw_url, timeout=config.timeout
    ) as fetcher:
        tracker = DependencyTracker(config, RepositoryDiscovery(client), fetcher)
        try:
            return await tracker.run(on_start)
        finally:
            for bar in bars:
                bar.close()


@click.command()
@click.option("-o", "--org", "orgs", multiple=True, help="Organization to crawl (repeatable)")
@click.option("-r", "--repo", "repos", multiple=True, help="Repository slug org/name (repeatable)")
@click.option("-p", "--package", "package_filter", default="", help="Only report dependencies whose path contains this")
@click.option("-n", "--name-filter", default="", help="Only scan repositories whose name contains this")
@click.option("-l", "--limit", default=0, type=int, help="Scan at most this many repositories (0 = all)")
@click.option("-c", "--concurrency", default=DEFAULT_CONCURRENCY, type=int, help="Concurrent fetches")
@click.option("-e", "--show-errors", is_flag=True, help="List repositories that failed")
@click.option("-f", "--output", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write a CSV file instead of TSV to stdout")
@click.option(
    "-m",
    "--mode",
    type=click.Choice([m.value for m in ScanMode]),
    default=ScanMode.GOMOD.value,
    show_default=True,
    help="Manifest to read: vendor/vendor.json or go.mod",
)
@click.option("-b", "--branch", default="master", show_default=True, help="Branch to read manifests from")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub API token (env: GITHUB_TOKEN)")
@click.option("--timeout", default=30.0, type=float, help="HTTP timeout in seconds")
@click.option("--no-progress", is_flag=True, help="Hide the progress bar")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(
    orgs: tuple[str, ...],
    repos: tuple[str, ...],
    package_filter: str,
    name_filter: str,
    limit: int,
    concurrency: int,
    show_errors: bool,
    output: Path | None,
    mode: str,
    branch: str,
    token: str | None,
    timeout: float,
    no_progress: bool,
    verbose: bool,
) -> None:
    """deptrack: which Go dependency versions are used by which repositories."""
    setup_logging("DEBUG" if verbose else None)

    try:
        config = RunConfig.build(
            orgs=orgs,
            repos=repos,
            package_filter=package_filter,
            name_filter=name_filter,
            limit=limit,
            concurrency=concurrency,
            show_errors=show_errors,
            output=output,
            mode=mode,
            branch=branch,
            token=token,
            timeout=timeout,
        )
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    show_progress = not no_progress and sys.stderr.isatty()
    try:
        result = asyncio.run(_run(config, show_progress))
    except (DiscoveryError, NoRepositoriesError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if config.output is None:
        write_report(result, config.mode, sys.stdout, config.delimiter)
    else:
        try:
            with config.output.open("w", newline="", encoding="utf-8") as fh:
                rows = write_report(result, config.mode, fh, config.delimiter)
        except OSError as e:
            click.echo(f"Error saving file {config.output}: {e}", err=True)
            sys.exit(1)
        click.echo(f"Wrote {rows} dependencies to {config.output}", err=True)

    if config.show_errors and result.failures:
        click.echo("Failed repositories:", err=True)
        write_failures(result.failures, sys.stderr)
    click.echo(summary_line(result), err=True)


if __name__ == "__main__":
    main()
