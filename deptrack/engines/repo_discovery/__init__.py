"""Repository discovery — list the repositories a run should scan."""

from deptrack.engines.repo_discovery.discovery import RepositoryDiscovery
from deptrack.engines.repo_discovery.github_client import GitHubClient

__all__ = ["GitHubClient", "RepositoryDiscovery"]
