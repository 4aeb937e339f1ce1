"""Run configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from deptrack.core.github import parse_repo_slug
from deptrack.engines.dependency_scanner.fetcher import DEFAULT_BRANCH, DEFAULT_RAW_URL
from deptrack.engines.dependency_scanner.modes import ScanMode
from deptrack.engines.repo_discovery.github_client import DEFAULT_API_URL
from deptrack.exceptions import ConfigError

DEFAULT_CONCURRENCY = 3


class RunConfig(BaseModel):
    """Everything one run needs. Validated before any network activity."""

    model_config = ConfigDict(frozen=True)

    orgs: tuple[str, ...] = ()
    repos: tuple[str, ...] = ()
    package_filter: str = ""
    name_filter: str = ""
    limit: int = Field(0, ge=0)
    concurrency: int = Field(DEFAULT_CONCURRENCY, ge=1)
    show_errors: bool = False
    output: Path | None = None
    mode: ScanMode = ScanMode.GOMOD
    branch: str = Field(DEFAULT_BRANCH, min_length=1)
    token: str | None = Field(None, repr=False)
    timeout: float = Field(30.0, gt=0)
    api_url: str = DEFAULT_API_URL
    raw_url: str = DEFAULT_RAW_URL

    @field_validator("orgs", "repos", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = (value,)
        if isinstance(value, (list, tuple)):
            return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())
        return value

    @field_validator("repos")
    @classmethod
    def _valid_slugs(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for slug in value:
            parse_repo_slug(slug)
        return value

    @model_validator(mode="after")
    def _needs_targets(self) -> RunConfig:
        if not self.orgs and not self.repos:
            raise ValueError("no organizations or repositories specified")
        return self

    @property
    def delimiter(self) -> str:
        """Tab for standard output, comma for a file."""
        return "," if self.output is not None else "\t"

    @classmethod
    def build(cls, **options: Any) -> RunConfig:
        """Validate *options*, raising :class:`ConfigError` on any problem."""
        try:
            return cls(**options)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ConfigError(problems) from exc
