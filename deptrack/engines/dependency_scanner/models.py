"""Data models for the dependency scanner engine."""

from __future__ import annotations

from dataclasses import dataclass

from deptrack.exceptions import FailureKind


@dataclass(frozen=True)
class RepositoryRef:
    """One unit of work: a repository whose manifest should be scanned."""

    org: str
    name: str
    package_filter: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.name}"


@dataclass(frozen=True)
class DependencyRecord:
    """A single dependency declared in a manifest.

    ``path`` is never empty. The remaining fields depend on the manifest
    format: vendor.json may fill all of them, go.mod only ``version``.
    """

    path: str
    revision: str = ""
    version: str = ""
    version_exact: str = ""


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str


@dataclass
class FetchOutcome:
    """Result of fetching and parsing one repository's manifest."""

    repository: RepositoryRef
    dependencies: tuple[DependencyRecord, ...] = ()
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

