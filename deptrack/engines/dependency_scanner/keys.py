"""Dependency keys, the de-duplication identity used by the aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field

from deptrack.engines.dependency_scanner.models import DependencyRecord

KEY_SEPARATOR = "_"


@dataclass(frozen=True, order=True)
class DependencyKey:
    """Aggregation key derived from a :class:`DependencyRecord`.

    Identity and ordering use ``value`` only: the non-empty fields joined in
    the order path, revision, version, exact version. Records whose
    non-empty fields form the same sequence collapse onto one key, even if
    the fields sit in different slots. ``record`` is a representative record
    used only for display.
    """

    value: str
    record: DependencyRecord = field(compare=False, hash=False)

    @classmethod
    def from_record(cls, record: DependencyRecord) -> DependencyKey:
        return cls(value=key_string(record), record=record)

    def __str__(self) -> str:
        return self.value


def key_string(record: DependencyRecord) -> str:
    parts = (record.path, record.revision, record.version, record.version_exact)
    return KEY_SEPARATOR.join(p for p in parts if p)
