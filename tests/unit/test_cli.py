"""
Unit tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner
from rich.console import Console

from nsescan import cli
from nsescan.cli import main
from nsescan.datasource import InMemoryMarketDataSource
from nsescan.exceptions import FetchError

# Keep log records out of the captured output
QUIET_ENV = {"LOG_LEVEL": "CRITICAL", "LOG_FILE_PATH": ""}


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    # Wide enough that table cells never wrap
    monkeypatch.setattr(cli, "console", Console(width=200))
    return CliRunner()


def invoke(runner: CliRunner, *args):
    return runner.invoke(main, list(args), env=QUIET_ENV)


class TestWindowCommand:
    """Test the window command."""

    def test_window(self, runner) -> None:
        result = invoke(runner, "window", "2024-01-08")

        assert result.exit_code == 0
        assert "08-01-2024" in result.output
        assert "05-01-2024" in result.output
        assert "08012024,05012024,04012024" in result.output

    def test_weekend_rejected(self, runner) -> None:
        result = invoke(runner, "window", "2024-01-06")

        assert result.exit_code == 2
        assert "weekend" in result.output

    def test_bad_date_format_rejected(self, runner) -> None:
        result = invoke(runner, "window", "05-01-2024")
        assert result.exit_code == 2


class TestSectorsCommand:
    """Test the sectors command."""

    def test_json_report(self, runner, market_fixture_path) -> None:
        result = invoke(
            runner, "sectors", "2024-01-05",
            "-s", "Nifty Bank", "-s", "Nifty IT", "-s", "Nifty Auto",
            "--fixture", str(market_fixture_path), "--json",
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["anchor_date"] == "2024-01-05"
        assert [v["instrument_id"] for v in data["verdicts"]] == ["Nifty Bank"]
        assert data["verdicts"][0]["pattern_type"] == "bearish-then-bullish"

    def test_table_report(self, runner, market_fixture_path) -> None:
        result = invoke(
            runner, "sectors", "2024-01-05", "-s", "Nifty Bank",
            "--fixture", str(market_fixture_path),
        )

        assert result.exit_code == 0, result.output
        assert "Nifty Bank" in result.output
        assert "bearish-then-bullish" in result.output

    def test_no_matches(self, runner, market_fixture_path) -> None:
        result = invoke(
            runner, "sectors", "2024-01-05", "-s", "Nifty IT",
            "--fixture", str(market_fixture_path),
        )

        assert result.exit_code == 0
        assert "No sector matched" in result.output


class TestStocksCommand:
    """Test the stocks command."""

    def test_json_report(self, runner, market_fixture_path) -> None:
        result = invoke(
            runner, "stocks", "2024-01-05", "infy", "TCS", "WIPRO",
            "--fixture", str(market_fixture_path), "--json",
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        verdicts = {v["instrument_id"]: v for v in data["verdicts"]}
        assert list(verdicts) == ["INFY", "TCS"]
        assert verdicts["INFY"]["passed"] is True
        assert verdicts["INFY"]["display_name"] == "Infosys Ltd."
        assert verdicts["TCS"]["passed"] is False
        assert data["passed_count"] == 1
        assert data["failed_count"] == 1

    def test_table_hides_failed(self, runner, market_fixture_path) -> None:
        result = invoke(
            runner, "stocks", "2024-01-05", "INFY", "TCS",
            "--fixture", str(market_fixture_path), "--no-failed",
        )

        assert result.exit_code == 0, result.output
        assert "Infosys" in result.output
        assert "Tata Consultancy" not in result.output

    def test_requires_symbols(self, runner) -> None:
        result = invoke(runner, "stocks", "2024-01-05")
        assert result.exit_code == 2

    def test_directory_failure_exits_nonzero(self, runner, monkeypatch) -> None:
        source = InMemoryMarketDataSource(
            directory_error=FetchError("instrument directory", "Service Unavailable", status_code=503)
        )
        monkeypatch.setattr(cli, "_build_source", lambda config, fixture: source)

        result = invoke(runner, "stocks", "2024-01-05", "INFY")

        assert result.exit_code == 1
        assert "Analysis failed" in result.output
