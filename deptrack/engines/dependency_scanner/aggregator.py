"""Fold per-repository outcomes into the cross-repository view."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import astuple, dataclass, field

from deptrack.engines.dependency_scanner.keys import DependencyKey, key_string
from deptrack.engines.dependency_scanner.models import DependencyRecord, FetchOutcome


@dataclass
class AggregateResult:
    """Aggregated view of a full run.

    ``entries`` iterates in ascending key order and maps each key to the
    sorted, de-duplicated names of the repositories that declare it.
    """

    entries: dict[DependencyKey, tuple[str, ...]] = field(default_factory=dict)
    failures: list[FetchOutcome] = field(default_factory=list)
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return len(self.failures)


def aggregate(outcomes: Iterable[FetchOutcome]) -> AggregateResult:
    """Build the sorted mapping from every outcome of a drained pool.

    Every failure kind, including a missing manifest, is excluded from the
    mapping and reported in ``failures``. The result does not depend on the
    order of *outcomes*.
    """
    by_key: dict[str, tuple[DependencyRecord, set[str]]] = {}
    failures: list[FetchOutcome] = []
    succeeded = 0

    for outcome in outcomes:
        if not outcome.ok:
            failures.append(outcome)
            continue
        succeeded += 1
        name = outcome.repository.full_name
        for record in outcome.dependencies:
            value = key_string(record)
            entry = by_key.get(value)
            if entry is None:
                by_key[value] = (record, {name})
                continue
            shown, repos = entry
            repos.add(name)
            # Colliding records: show the smallest so input order never matters.
            if astuple(record) < astuple(shown):
                by_key[value] = (record, repos)

    entries = {
        DependencyKey(value=value, record=record): tuple(sorted(repos))
        for value, (record, repos) in sorted(by_key.items(), key=lambda kv: kv[0])
    }
    failures.sort(
        key=lambda o: (o.repository.full_name, o.failure.kind.value, o.failure.message)
    )
    return AggregateResult(entries=entries, failures=failures, succeeded=succeeded)
