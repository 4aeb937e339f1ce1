"""Dependency scanner engine — fetch, parse and aggregate Go manifests."""

# Ensure parsers are registered before any scan runs.
import deptrack.engines.dependency_scanner.parsers  # noqa: F401
from deptrack.engines.dependency_scanner.aggregator import AggregateResult, aggregate
from deptrack.engines.dependency_scanner.keys import DependencyKey
from deptrack.engines.dependency_scanner.models import (
    DependencyRecord,
    Failure,
    FetchOutcome,
    RepositoryRef,
)
from deptrack.engines.dependency_scanner.modes import ScanMode

__all__ = [
    "AggregateResult",
    "DependencyKey",
    "DependencyRecord",
    "Failure",
    "FetchOutcome",
    "RepositoryRef",
    "ScanMode",
    "aggregate",
]
