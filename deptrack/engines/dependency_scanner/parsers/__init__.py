"""Manifest parsers — auto-registered on import."""

from deptrack.engines.dependency_scanner.parsers import (
    go_mod,  # noqa: F401
    vendor_json,  # noqa: F401
)
