"""Tests for RunConfig validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from deptrack.config import DEFAULT_CONCURRENCY, RunConfig
from deptrack.engines.dependency_scanner.modes import ScanMode
from deptrack.exceptions import ConfigError


class TestRunConfig:
    def test_defaults(self):
        cfg = RunConfig.build(orgs=["acme"])
        assert cfg.orgs == ("acme",)
        assert cfg.concurrency == DEFAULT_CONCURRENCY
        assert cfg.limit == 0
        assert cfg.mode is ScanMode.GOMOD
        assert cfg.branch == "master"
        assert cfg.output is None

    def test_requires_org_or_repo(self):
        with pytest.raises(ConfigError, match="no organizations or repositories"):
            RunConfig.build()

    def test_blank_targets_ignored(self):
        with pytest.raises(ConfigError):
            RunConfig.build(orgs=["  "], repos=[""])

    def test_invalid_repo_slug(self):
        with pytest.raises(ConfigError, match="cannot parse GitHub repository"):
            RunConfig.build(repos=["just-a-name"])

    @pytest.mark.parametrize("concurrency", [0, -3])
    def test_concurrency_must_be_positive(self, concurrency):
        with pytest.raises(ConfigError, match="concurrency"):
            RunConfig.build(orgs=["acme"], concurrency=concurrency)

    def test_negative_limit(self):
        with pytest.raises(ConfigError, match="limit"):
            RunConfig.build(orgs=["acme"], limit=-1)

    def test_unknown_mode(self):
        with pytest.raises(ConfigError, match="mode"):
            RunConfig.build(orgs=["acme"], mode="cargo")

    def test_delimiter_follows_output(self, tmp_path: Path):
        assert RunConfig.build(orgs=["acme"]).delimiter == "\t"
        assert RunConfig.build(orgs=["acme"], output=tmp_path / "deps.csv").delimiter == ","

    def test_token_hidden_from_repr(self):
        cfg = RunConfig.build(orgs=["acme"], token="ghp_secret")
        assert "ghp_secret" not in repr(cfg)

    def test_frozen(self):
        cfg = RunConfig.build(orgs=["acme"])
        with pytest.raises(Exception):
            cfg.limit = 5


class TestScanMode:
    def test_vendor(self):
        assert ScanMode.VENDOR.manifest_path == "vendor/vendor.json"
        assert ScanMode.VENDOR.parser_format == "vendor-json"

    def test_gomod(self):
        assert ScanMode.GOMOD.manifest_path == "go.mod"
        assert ScanMode.GOMOD.parser_format == "go-mod"
        assert ScanMode.GOMOD.columns == ("Package", "Version")
