"""Tabular dependency report and failure listing."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from typing import IO

from deptrack.engines.dependency_scanner.aggregator import AggregateResult
from deptrack.engines.dependency_scanner.models import FetchOutcome
from deptrack.engines.dependency_scanner.modes import ScanMode

REPOSITORY_SEPARATOR = ";"


def header(mode: ScanMode) -> list[str]:
    return [*mode.columns, "Count", "Repositories"]


def rows(result: AggregateResult, mode: ScanMode) -> Iterable[list[str]]:
    """One row per dependency key, in key order."""
    for key, repos in result.entries.items():
        yield [
            *mode.key_fields(key.record),
            str(len(repos)),
            REPOSITORY_SEPARATOR.join(repos),
        ]


def write_report(
    result: AggregateResult,
    mode: ScanMode,
    stream: IO[str],
    delimiter: str = ",",
) -> int:
    """Write header plus rows to *stream*; returns the number of data rows."""
    writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
    writer.writerow(header(mode))
    count = 0
    for row in rows(result, mode):
        writer.writerow(row)
        count += 1
    return count


def write_failures(failures: Iterable[FetchOutcome], stream: IO[str]) -> None:
    for outcome in failures:
        failure = outcome.failure
        if failure is None:
            continue
        stream.write(f"{outcome.repository.full_name}: {failure.kind.value}: {failure.message}\n")


def summary_line(result: AggregateResult) -> str:
    return f"Succeeded: {result.succeeded}, Failed: {result.failed}"
