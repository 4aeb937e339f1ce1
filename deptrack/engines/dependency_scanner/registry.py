"""Parser registry — look up manifest parsers by format name."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from deptrack.engines.dependency_scanner.models import DependencyRecord


@runtime_checkable
class ManifestParser(Protocol):
    """Interface that every manifest parser must satisfy.

    ``parse`` raises :class:`deptrack.exceptions.ManifestParseError` on
    malformed input.
    """

    format: str

    def parse(self, content: bytes) -> list[DependencyRecord]: ...


PARSER_REGISTRY: dict[str, ManifestParser] = {}


def register_parser(parser: ManifestParser) -> None:
    """Register a parser instance by its format name."""
    PARSER_REGISTRY[parser.format] = parser


def get_parser(fmt: str) -> ManifestParser:
    try:
        return PARSER_REGISTRY[fmt]
    except KeyError:
        raise ValueError(f"no parser registered for format {fmt!r}") from None


def parse(fmt: str, content: bytes) -> list[DependencyRecord]:
    """Parse *content* with the parser registered for *fmt*."""
    return get_parser(fmt).parse(content)


def filter_dependencies(
    records: list[DependencyRecord], package_filter: str
) -> list[DependencyRecord]:
    """Keep records whose path contains *package_filter* (case-sensitive).

    An empty filter keeps everything.
    """
    if not package_filter:
        return list(records)
    return [r for r in records if package_filter in r.path]
