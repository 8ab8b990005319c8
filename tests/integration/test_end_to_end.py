"""
Integration tests for complete screening runs.

Drives both orchestrators through HttpMarketDataSource against a mock API
that serves tests/fixtures/market.json and filters rows by the requested
query dates, the way the real data API does.
"""

import json

import httpx
import pytest

from factories import ANCHOR, FIXTURES_DIR, WINDOW
from nsescan.analysis import SectorAnalysisOrchestrator, StockAnalysisOrchestrator
from nsescan.config import Config
from nsescan.datasource import HttpMarketDataSource
from nsescan.dates import decode_display_date, encode_for_query, parse_timestamp
from nsescan.exceptions import SetupFailure
from nsescan.models import PatternType
from nsescan.strategies import CANDLE_MISMATCH_REASON

pytestmark = pytest.mark.integration


def _stock_query_date(row: dict) -> str:
    return encode_for_query(parse_timestamp(row["timestamp"]).date())


class MockMarketApi:
    """Serves fixture rows over httpx.MockTransport."""

    def __init__(self, directory_status: int = 200):
        with open(FIXTURES_DIR / "market.json", encoding="utf-8") as f:
            self.data = json.load(f)
        self.directory_status = directory_status
        self.paths = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.paths.append(path)
        wanted = set(request.url.params.get("dates", "").split(","))

        if path.endswith("/indice/by-dates-and-index"):
            rows = self.data["indices"].get(request.url.params["index"], [])
            return httpx.Response(200, json=[
                row for row in rows
                if encode_for_query(decode_display_date(row["indexDate"])) in wanted
            ])

        if path.endswith("/stock/by-dates-and-symbol"):
            rows = self.data["stocks"].get(request.url.params["symbol"], [])
            return httpx.Response(200, json=[
                row for row in rows if _stock_query_date(row) in wanted
            ])

        if path.endswith("/nifty50"):
            if self.directory_status != 200:
                return httpx.Response(self.directory_status)
            return httpx.Response(200, json=self.data["directory"])

        return httpx.Response(404)


@pytest.fixture
def config() -> Config:
    return Config()


def make_client(handler, config: Config) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=config.datasource.base_url,
        transport=httpx.MockTransport(handler),
    )


class TestSectorRun:
    """End-to-end sector screening."""

    @pytest.mark.asyncio
    async def test_only_matching_sector_reported(self, config) -> None:
        api = MockMarketApi()

        async with make_client(api, config) as client:
            source = HttpMarketDataSource(config.datasource, client=client)
            orchestrator = SectorAnalysisOrchestrator.from_config(source, config)
            report = await orchestrator.run(ANCHOR, ["Nifty IT", "Nifty Bank", "Nifty Auto", "Nifty Metal"])

        assert report.window == WINDOW
        assert report.instrument_ids == ["Nifty Bank"]
        bank = report.verdicts[0]
        assert bank.pattern_type == PatternType.BEARISH_THEN_BULLISH
        assert [r.volume for r in bank.records] == [500, 400, 300]
        assert len(api.paths) == 4

    @pytest.mark.asyncio
    async def test_server_error_omits_sector(self, config) -> None:
        api = MockMarketApi()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("index") == "Nifty IT":
                return httpx.Response(500)
            return api(request)

        async with make_client(handler, config) as client:
            source = HttpMarketDataSource(config.datasource, client=client)
            report = await SectorAnalysisOrchestrator(source).run(ANCHOR, ["Nifty IT", "Nifty Bank"])

        assert report.instrument_ids == ["Nifty Bank"]


class TestStockRun:
    """End-to-end stock screening."""

    @pytest.mark.asyncio
    async def test_passed_and_failed_stocks(self, config) -> None:
        api = MockMarketApi()

        async with make_client(api, config) as client:
            source = HttpMarketDataSource(config.datasource, client=client)
            report = await StockAnalysisOrchestrator.from_config(source, config).run(
                ANCHOR, ["INFY", "TCS", "WIPRO"]
            )

        assert report.instrument_ids == ["INFY", "TCS"]
        infy, tcs = report.verdicts
        assert infy.passed
        assert infy.pattern_type == PatternType.BULLISH_THEN_BEARISH
        assert infy.display_name == "Infosys Ltd."
        assert not tcs.passed
        assert tcs.reason == CANDLE_MISMATCH_REASON
        assert api.paths.count("/api/nifty50") == 1

    @pytest.mark.asyncio
    async def test_directory_outage_fails_run(self, config) -> None:
        api = MockMarketApi(directory_status=503)

        async with make_client(api, config) as client:
            source = HttpMarketDataSource(config.datasource, client=client)
            with pytest.raises(SetupFailure):
                await StockAnalysisOrchestrator(source).run(ANCHOR, ["INFY"])

        assert api.paths == ["/api/nifty50"]
