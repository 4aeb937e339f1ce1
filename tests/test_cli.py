"""Tests for the deptrack CLI (network collaborators are mocked)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from deptrack.cli import main
from deptrack.engines.dependency_scanner.aggregator import aggregate
from deptrack.engines.dependency_scanner.models import (
    DependencyRecord,
    Failure,
    FetchOutcome,
    RepositoryRef,
)
from deptrack.exceptions import DiscoveryError, FailureKind, NoRepositoriesError


@pytest.fixture
def result():
    dep = DependencyRecord(path="golang.org/x/net", version="v0.1.0")
    return aggregate(
        [
            FetchOutcome(RepositoryRef("acme", "a"), (dep,)),
            FetchOutcome(RepositoryRef("acme", "b"), (dep,)),
            FetchOutcome(RepositoryRef("acme", "c"), failure=Failure(FailureKind.NOT_FOUND, "HTTP 404")),
        ]
    )


class TestConfigErrors:
    def test_no_targets_exits_before_network(self):
        with patch("deptrack.cli._run", new_callable=AsyncMock) as run:
            res = CliRunner().invoke(main, [])
        assert res.exit_code == 2
        assert "no organizations or repositories" in res.output
        run.assert_not_called()

    def test_invalid_concurrency(self):
        with patch("deptrack.cli._run", new_callable=AsyncMock) as run:
            res = CliRunner().invoke(main, ["-o", "acme", "-c", "0"])
        assert res.exit_code == 2
        run.assert_not_called()

    def test_non_numeric_limit_rejected_by_click(self):
        res = CliRunner().invoke(main, ["-o", "acme", "-l", "many"])
        assert res.exit_code == 2


class TestRun:
    def test_tsv_report_to_stdout(self, result):
        with patch("deptrack.cli._run", new=AsyncMock(return_value=result)):
            res = CliRunner().invoke(main, ["-o", "acme"])
        assert res.exit_code == 0
        lines = res.stdout.splitlines()
        assert lines[0] == "Package\tVersion\tCount\tRepositories"
        assert lines[1] == "golang.org/x/net\tv0.1.0\t2\tacme/a;acme/b"
        assert "Succeeded: 2, Failed: 1" in res.output

    def test_csv_report_to_file(self, result, tmp_path: Path):
        out_file = tmp_path / "deps.csv"
        with patch("deptrack.cli._run", new=AsyncMock(return_value=result)):
            res = CliRunner().invoke(main, ["-o", "acme", "-f", str(out_file)])
        assert res.exit_code == 0
        assert out_file.read_text().splitlines() == [
            "Package,Version,Count,Repositories",
            "golang.org/x/net,v0.1.0,2,acme/a;acme/b",
        ]

    def test_show_errors_lists_failures(self, result):
        with patch("deptrack.cli._run", new=AsyncMock(return_value=result)):
            res = CliRunner().invoke(main, ["-o", "acme", "--show-errors"])
        assert res.exit_code == 0
        assert "acme/c: not_found: HTTP 404" in res.output

    def test_failures_hidden_by_default(self, result):
        with patch("deptrack.cli._run", new=AsyncMock(return_value=result)):
            res = CliRunner().invoke(main, ["-o", "acme"])
        assert "acme/c:" not in res.output

    def test_config_passed_through(self, result):
        run = AsyncMock(return_value=result)
        with patch("deptrack.cli._run", new=run):
            CliRunner().invoke(
                main,
                ["-r", "acme/svc", "-m", "vendor", "-p", "hashicorp", "-l", "3", "-b", "main"],
                env={"GITHUB_TOKEN": "ghp_env"},
            )
        config = run.call_args[0][0]
        assert config.repos == ("acme/svc",)
        assert config.mode.value == "vendor"
        assert config.package_filter == "hashicorp"
        assert config.limit == 3
        assert config.branch == "main"
        assert config.token == "ghp_env"

    @pytest.mark.parametrize(
        "error",
        [DiscoveryError("error listing repositories for acme"), NoRepositoriesError("no repositories found")],
    )
    def test_fatal_errors_exit_1(self, error):
        with patch("deptrack.cli._run", new=AsyncMock(side_effect=error)):
            res = CliRunner().invoke(main, ["-o", "acme"])
        assert res.exit_code == 1
        assert str(error) in res.output

    def test_unwritable_output_exits_1(self, result, tmp_path: Path):
        out_file = tmp_path / "missing-dir" / "deps.csv"
        with patch("deptrack.cli._run", new=AsyncMock(return_value=result)):
            res = CliRunner().invoke(main, ["-o", "acme", "-f", str(out_file)])
        assert res.exit_code == 1
        assert "Error saving file" in res.output
        assert not out_file.exists()
