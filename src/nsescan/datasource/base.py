"""Abstract market data source.

The orchestrators only ever talk to this interface, so the HTTP client can be
swapped for an in-memory fixture in tests or offline runs.
"""

import abc
from typing import List

from ..models.market_data import IndexRecord, InstrumentInfo, StockRecord


class MarketDataSource(abc.ABC):
    """Fetch daily index/stock records and the instrument directory."""

    @abc.abstractmethod
    async def fetch_index_records(self, date_list: str, index_name: str) -> List[IndexRecord]:
        """
        Fetch one sector index's records for the given query dates.

        Args:
            date_list: Comma-joined ``DDMMYYYY`` dates
            index_name: Index display name, e.g. ``Nifty Bank``

        Raises:
            FetchError: transport failure or non-success status
            FormatError: a row could not be parsed
        """
        ...

    @abc.abstractmethod
    async def fetch_stock_records(self, date_list: str, symbol: str) -> List[StockRecord]:
        """Fetch one equity's records for the given query dates."""
        ...

    @abc.abstractmethod
    async def fetch_instrument_directory(self) -> List[InstrumentInfo]:
        """Fetch the static list of screenable equities."""
        ...

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "MarketDataSource":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
