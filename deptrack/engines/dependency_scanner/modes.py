"""Scan modes: which manifest to fetch, how to parse it, how to report it."""

from __future__ import annotations

from enum import Enum

from deptrack.engines.dependency_scanner.models import DependencyRecord


class ScanMode(str, Enum):
    VENDOR = "vendor"
    GOMOD = "gomod"

    @property
    def manifest_path(self) -> str:
        return _MANIFEST_PATHS[self]

    @property
    def parser_format(self) -> str:
        return _PARSER_FORMATS[self]

    @property
    def columns(self) -> tuple[str, ...]:
        """Report columns describing the key, before ``Count`` and ``Repositories``."""
        return _KEY_COLUMNS[self]

    def key_fields(self, record: DependencyRecord) -> tuple[str, ...]:
        if self is ScanMode.VENDOR:
            return (record.path, record.revision, record.version, record.version_exact)
        return (record.path, record.version)


_MANIFEST_PATHS = {
    ScanMode.VENDOR: "vendor/vendor.json",
    ScanMode.GOMOD: "go.mod",
}

_PARSER_FORMATS = {
    ScanMode.VENDOR: "vendor-json",
    ScanMode.GOMOD: "go-mod",
}

_KEY_COLUMNS = {
    ScanMode.VENDOR: ("Package", "Revision", "Version", "VersionExact"),
    ScanMode.GOMOD: ("Package", "Version"),
}
