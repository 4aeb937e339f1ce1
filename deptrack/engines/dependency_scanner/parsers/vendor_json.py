"""Parser for govendor vendor/vendor.json lock files."""

from __future__ import annotations

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from deptrack.engines.dependency_scanner.models import DependencyRecord
from deptrack.engines.dependency_scanner.registry import register_parser
from deptrack.exceptions import ManifestParseError

log = structlog.get_logger("deptrack.engine")


class VendorPackage(BaseModel):
    """One ``package`` entry. govendor writes camelCase keys; Go readers also accept PascalCase."""

    model_config = ConfigDict(extra="ignore")

    path: str = Field("", validation_alias=AliasChoices("path", "Path"))
    revision: str = Field("", validation_alias=AliasChoices("revision", "Revision"))
    version: str = Field("", validation_alias=AliasChoices("version", "Version"))
    version_exact: str = Field(
        "", validation_alias=AliasChoices("versionExact", "VersionExact")
    )

    @field_validator("path", "revision", "version", "version_exact", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return "" if value is None else value


class VendorFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    comment: str = ""
    ignore: str = ""
    package: list[VendorPackage] = Field(
        default_factory=list, validation_alias=AliasChoices("package", "Package")
    )

    @field_validator("comment", "ignore", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("package", mode="before")
    @classmethod
    def _null_is_no_packages(cls, value: object) -> object:
        return [] if value is None else value


class VendorJsonParser:
    format = "vendor-json"

    def parse(self, content: bytes) -> list[DependencyRecord]:
        try:
            vendor = VendorFile.model_validate_json(content)
        except ValidationError as exc:
            first = exc.errors()[0]
            where = ".".join(str(part) for part in first["loc"]) or "document"
            raise ManifestParseError(f"invalid vendor.json ({where}: {first['msg']})") from exc

        deps: list[DependencyRecord] = []
        for pkg in vendor.package:
            if not pkg.path:
                log.debug("parser.vendor_entry_without_path", revision=pkg.revision)
                continue
            deps.append(
                DependencyRecord(
                    path=pkg.path,
                    revision=pkg.revision,
                    version=pkg.version,
                    version_exact=pkg.version_exact,
                )
            )
        return deps


register_parser(VendorJsonParser())
