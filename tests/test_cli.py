"""Tests for the Typer CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from omnisearch import cli
from omnisearch.config.settings import Settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fast_cli_settings(monkeypatch: pytest.MonkeyPatch, fast_settings: Settings) -> None:
    monkeypatch.setattr(cli, "get_settings", lambda: fast_settings)


class TestTools:
    def test_lists_catalog(self) -> None:
        result = runner.invoke(cli.app, ["tools"])
        assert result.exit_code == 0
        assert "gmail" in result.output
        assert "credential" in result.output
        assert "slack" in result.output
        assert "simulated" in result.output


class TestSearch:
    def test_prints_ranked_results(self) -> None:
        result = runner.invoke(cli.app, ["search", "budget", "-c", "slack", "-c", "jira"])
        assert result.exit_code == 0, result.output
        assert "result(s)" in result.output or "No results." in result.output

    def test_type_filter(self) -> None:
        result = runner.invoke(cli.app, ["search", "a", "-c", "github", "--type", "code", "--max", "3"])
        assert result.exit_code == 0, result.output
        lines = [line for line in result.output.splitlines() if "[github]" in line]
        assert 0 < len(lines) <= 3
        assert all(" code " in line for line in lines)

    def test_unknown_tool(self) -> None:
        result = runner.invoke(cli.app, ["search", "x", "-c", "nope"])
        assert result.exit_code == 1
        assert "Unknown tool" in result.output

    def test_unknown_content_type(self) -> None:
        result = runner.invoke(cli.app, ["search", "x", "--type", "spreadsheet"])
        assert result.exit_code == 1
        assert "Unknown content type" in result.output

    def test_signed_out_credential_tool(self) -> None:
        result = runner.invoke(cli.app, ["search", "x", "-c", "gmail"])
        assert result.exit_code == 1
        assert "[error] gmail" in result.output
        assert "No tools connected." in result.output


class TestHealth:
    def test_reports_health_and_stats(self) -> None:
        result = runner.invoke(cli.app, ["health", "-c", "slack"])
        assert result.exit_code == 0, result.output
        assert "slack" in result.output
        assert "healthy" in result.output
        assert "Connected 1/15" in result.output
