"""
HTTP market data source.

Talks JSON to the NSE data API of the reference deployment:

- ``GET /indice/by-dates-and-index?dates=...&index=...``
- ``GET /stock/by-dates-and-symbol?dates=...&symbol=...``
- ``GET /nifty50``
"""

import time
from collections import deque
from typing import Any, Dict, List, Optional

import httpx

from ..config import DataSourceConfig
from ..exceptions import FetchError, FormatError
from ..logger import get_logger
from ..models.market_data import IndexRecord, InstrumentInfo, StockRecord
from .base import MarketDataSource

logger = get_logger(__name__)

INDEX_RECORDS_PATH = "/indice/by-dates-and-index"
STOCK_RECORDS_PATH = "/stock/by-dates-and-symbol"
DIRECTORY_PATH = "/nifty50"
DIRECTORY_ID = "instrument directory"


class ConnectionMonitor:
    """
    Track request outcomes and latency against the data API.
    """

    def __init__(self, window_size: int = 100):
        self.window_size = window_size
        self.request_times = deque(maxlen=window_size)
        self.total_requests = 0
        self.successful_requests = 0
        self.error_count = 0
        self.timeouts = 0

    def record_request(self, duration: float, success: bool, error_type: Optional[str] = None) -> None:
        """Record a request result."""
        self.total_requests += 1
        self.request_times.append(duration)

        if success:
            self.successful_requests += 1
        else:
            self.error_count += 1
            if error_type == 'timeout':
                self.timeouts += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get performance statistics."""
        if not self.request_times:
            return {
                'avg_response_time': 0,
                'success_rate': 0,
                'total_requests': self.total_requests,
                'error_count': self.error_count,
                'timeouts': self.timeouts
            }

        return {
            'avg_response_time': sum(self.request_times) / len(self.request_times),
            'max_response_time': max(self.request_times),
            'success_rate': (self.successful_requests / self.total_requests) * 100,
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'error_count': self.error_count,
            'timeouts': self.timeouts
        }


class HttpMarketDataSource(MarketDataSource):
    """
    MarketDataSource backed by ``httpx.AsyncClient``.

    Non-success statuses, transport errors and timeouts surface as
    FetchError; payloads that do not validate surface as FormatError.
    """

    def __init__(
        self,
        config: Optional[DataSourceConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            config: Data source configuration (base URL, timeout)
            client: Pre-built client, e.g. one using ``httpx.MockTransport``;
                it is not closed by :meth:`aclose`
        """
        self.config = config or DataSourceConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_seconds)
        )
        self.monitor = ConnectionMonitor()

        logger.debug(f"HTTP data source initialized with base URL: {self.config.base_url}")

    async def aclose(self) -> None:
        stats = self.monitor.get_stats()
        if stats['total_requests']:
            logger.debug(
                f"Data API: {stats['total_requests']} requests, "
                f"{stats['success_rate']:.1f}% successful, "
                f"{stats['timeouts']} timeouts, "
                f"avg {stats['avg_response_time']:.3f}s, max {stats['max_response_time']:.3f}s"
            )
        if self._owns_client:
            await self._client.aclose()

    async def fetch_index_records(self, date_list: str, index_name: str) -> List[IndexRecord]:
        payload = await self._get_json(
            INDEX_RECORDS_PATH,
            params={"dates": date_list, "index": index_name},
            instrument=index_name
        )
        return [IndexRecord.from_api(row) for row in self._as_rows(payload, index_name)]

    async def fetch_stock_records(self, date_list: str, symbol: str) -> List[StockRecord]:
        payload = await self._get_json(
            STOCK_RECORDS_PATH,
            params={"dates": date_list, "symbol": symbol},
            instrument=symbol
        )
        return [StockRecord.from_api(row) for row in self._as_rows(payload, symbol)]

    async def fetch_instrument_directory(self) -> List[InstrumentInfo]:
        payload = await self._get_json(DIRECTORY_PATH, params=None, instrument=DIRECTORY_ID)
        return [InstrumentInfo.from_api(row) for row in self._as_rows(payload, DIRECTORY_ID)]

    async def _get_json(self, path: str, params: Optional[Dict[str, str]], instrument: str) -> Any:
        start = time.monotonic()
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            self.monitor.record_request(time.monotonic() - start, False, 'timeout')
            raise FetchError(instrument, "request timed out") from e
        except httpx.HTTPStatusError as e:
            self.monitor.record_request(time.monotonic() - start, False, 'status')
            raise FetchError(
                instrument,
                e.response.reason_phrase or "unsuccessful response",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            self.monitor.record_request(time.monotonic() - start, False, 'network')
            raise FetchError(instrument, str(e) or type(e).__name__) from e

        self.monitor.record_request(time.monotonic() - start, True)
        logger.debug(f"GET {path} for {instrument} -> {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise FormatError(f"Response for {instrument} is not valid JSON: {e}") from e

    @staticmethod
    def _as_rows(payload: Any, instrument: str) -> List[Dict[str, Any]]:
        if not isinstance(payload, list):
            raise FormatError(
                f"Expected a JSON array for {instrument}, got {type(payload).__name__}"
            )
        return payload
