"""
Unit tests for StockAnalysisOrchestrator.
"""

import asyncio
from datetime import date

import pytest

from factories import ANCHOR, WINDOW, stock_row
from nsescan.analysis import StockAnalysisOrchestrator
from nsescan.datasource import InMemoryMarketDataSource
from nsescan.exceptions import AnalysisFailure, FetchError, FormatError, SetupFailure
from nsescan.models import PatternType
from nsescan.strategies import CANDLE_MISMATCH_REASON

DIRECTORY = [
    {"symbol": "INFY", "companyName": "Infosys Ltd.", "industry": "Information Technology"},
    {"symbol": "TCS", "companyName": "Tata Consultancy Services Ltd."},
]


def passing_rows(symbol: str) -> list:
    return [
        stock_row(symbol, WINDOW[0], 3000, 100.0, 110.0),
        stock_row(symbol, WINDOW[1], 2000, 110.0, 100.0),
        stock_row(symbol, WINDOW[2], 1000, 100.0, 105.0),
    ]


def both_bullish_rows(symbol: str) -> list:
    return [
        stock_row(symbol, WINDOW[0], 3000, 100.0, 110.0),
        stock_row(symbol, WINDOW[1], 2000, 100.0, 110.0),
        stock_row(symbol, WINDOW[2], 1000, 100.0, 105.0),
    ]


class TestStockAnalysis:
    """Test stock screening runs."""

    @pytest.mark.asyncio
    async def test_passed_and_failed_both_reported(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY"), "TCS": both_bullish_rows("TCS")},
            directory=DIRECTORY,
        )

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY", "TCS"])

        assert report.instrument_ids == ["INFY", "TCS"]
        infy, tcs = report.verdicts
        assert infy.passed
        assert infy.pattern_type == PatternType.BULLISH_THEN_BEARISH
        assert infy.display_name == "Infosys Ltd."
        assert not tcs.passed
        assert tcs.reason == CANDLE_MISMATCH_REASON
        assert tcs.display_name == "Tata Consultancy Services Ltd."
        assert report.passed_count == 1
        assert report.failed_count == 1

    @pytest.mark.asyncio
    async def test_directory_fetched_once(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY"), "TCS": passing_rows("TCS")},
            directory=DIRECTORY,
        )

        await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY", "TCS"])

        kinds = [kind for kind, _, _ in source.requests]
        assert kinds.count("directory") == 1
        assert kinds[0] == "directory"

    @pytest.mark.asyncio
    async def test_display_name_falls_back_to_symbol(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"HDFCBANK": passing_rows("HDFCBANK")},
            directory=DIRECTORY,
        )

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["HDFCBANK"])

        assert report.verdicts[0].display_name == "HDFCBANK"

    @pytest.mark.asyncio
    async def test_fewer_than_three_records_omitted(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY"), "WIPRO": passing_rows("WIPRO")[:2]},
            directory=DIRECTORY,
        )

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["WIPRO", "INFY"])

        assert report.instrument_ids == ["INFY"]

    @pytest.mark.asyncio
    async def test_extra_records_kept_and_first_three_evaluated(self) -> None:
        rows = passing_rows("INFY") + [stock_row("INFY", date(2024, 1, 2), 9000)]

        class Unfiltered(InMemoryMarketDataSource):
            async def fetch_stock_records(self, date_list, symbol):
                return list(reversed(self.stocks[symbol]))

        source = Unfiltered(stocks={"INFY": rows}, directory=DIRECTORY)

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY"])

        verdict = report.verdicts[0]
        assert verdict.passed
        assert [r.date for r in verdict.records] == WINDOW + [date(2024, 1, 2)]
        assert len(verdict.candle_types) == 3

    @pytest.mark.asyncio
    async def test_stock_fetch_error_isolated(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY")},
            directory=DIRECTORY,
            errors={"TCS": FetchError("TCS", "Not Found", status_code=404)},
        )

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["TCS", "INFY"])

        assert report.instrument_ids == ["INFY"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        FetchError("instrument directory", "Service Unavailable", status_code=503),
        FormatError("Expected a JSON array"),
    ])
    async def test_directory_failure_aborts_run(self, error) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY")},
            directory_error=error,
        )

        with pytest.raises(SetupFailure) as exc_info:
            await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY"])

        assert isinstance(exc_info.value, AnalysisFailure)
        assert exc_info.value.__cause__ is error
        assert all(kind == "directory" for kind, _, _ in source.requests)

    @pytest.mark.asyncio
    async def test_directory_timeout_aborts_run(self) -> None:
        class HangingDirectory(InMemoryMarketDataSource):
            async def fetch_instrument_directory(self):
                await asyncio.Event().wait()

        source = HangingDirectory(stocks={"INFY": passing_rows("INFY")})

        with pytest.raises(SetupFailure):
            await StockAnalysisOrchestrator(source, fetch_timeout=0.05).run(ANCHOR, ["INFY"])

    @pytest.mark.asyncio
    async def test_symbols_deduplicated(self) -> None:
        source = InMemoryMarketDataSource(
            stocks={"INFY": passing_rows("INFY")},
            directory=DIRECTORY,
        )

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY", "INFY"])

        assert report.instrument_ids == ["INFY"]

    @pytest.mark.asyncio
    async def test_two_series_on_one_date_reported(self) -> None:
        """EQ and BE rows for the same day are both kept and evaluated in order."""
        second_series = stock_row("INFY", WINDOW[1], 1000, 100.0, 105.0)
        second_series["series"] = "BE"
        rows = [
            stock_row("INFY", WINDOW[0], 3000, 100.0, 110.0),
            stock_row("INFY", WINDOW[1], 2000, 110.0, 100.0),
            second_series,
            stock_row("INFY", WINDOW[2], 500, 100.0, 105.0),
        ]
        source = InMemoryMarketDataSource(stocks={"INFY": rows}, directory=DIRECTORY)

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY"])

        assert report.instrument_ids == ["INFY"]
        verdict = report.verdicts[0]
        assert verdict.passed
        assert [r.volume for r in verdict.records] == [3000, 2000, 1000, 500]

    @pytest.mark.asyncio
    async def test_placeholder_in_display_field_ignored(self) -> None:
        rows = passing_rows("INFY")
        for row in rows:
            row["lastPrice"] = "-"
            row["highPrice"] = "-"
            row["ttlTrdVal"] = ""
        source = InMemoryMarketDataSource(stocks={"INFY": rows}, directory=DIRECTORY)

        report = await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY"])

        assert report.instrument_ids == ["INFY"]
        assert report.verdicts[0].passed
