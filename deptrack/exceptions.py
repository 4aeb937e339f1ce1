"""Custom exceptions for deptrack."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Classification of a per-repository failure."""

    NETWORK = "network"
    NOT_FOUND = "not_found"
    PARSE = "parse"
    INTERNAL = "internal"


class DeptrackError(Exception):
    """Base exception for all deptrack errors."""


class ConfigError(DeptrackError):
    """Raised when the run configuration is invalid (no network activity yet)."""


class DiscoveryError(DeptrackError):
    """Raised when listing or looking up repositories fails. Fatal for the run."""


class NoRepositoriesError(DeptrackError):
    """Raised when discovery succeeds but yields no repositories."""


class RepositoryScanError(DeptrackError):
    """Per-repository failure. Recorded on the outcome, never aborts the batch."""

    kind: FailureKind = FailureKind.INTERNAL


class ManifestNetworkError(RepositoryScanError):
    """Raised when the manifest GET fails at the transport level."""

    kind = FailureKind.NETWORK


class ManifestNotFoundError(RepositoryScanError):
    """Raised when the manifest GET returns anything other than 200."""

    kind = FailureKind.NOT_FOUND

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"manifest not found at {url} (HTTP {status_code})")


class ManifestParseError(RepositoryScanError):
    """Raised when a manifest body is malformed."""

    kind = FailureKind.PARSE

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
