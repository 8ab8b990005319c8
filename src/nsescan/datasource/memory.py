"""
In-memory market data source.

Serves fixture rows instead of calling the data API. Rows are filtered by
the requested query dates the same way the API filters them, so a fixture
may hold more history than a single window.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..dates.codec import encode_for_query
from ..models.market_data import IndexRecord, InstrumentInfo, StockRecord
from .base import MarketDataSource

IndexRow = Union[IndexRecord, Dict[str, Any]]
StockRow = Union[StockRecord, Dict[str, Any]]


class InMemoryMarketDataSource(MarketDataSource):
    """
    MarketDataSource over dictionaries of fixture rows.

    ``errors`` maps an index name or symbol to an exception raised instead
    of returning data; ``directory_error`` does the same for the directory.
    Unknown instruments yield no rows.
    """

    def __init__(
        self,
        indices: Optional[Mapping[str, Iterable[IndexRow]]] = None,
        stocks: Optional[Mapping[str, Iterable[StockRow]]] = None,
        directory: Optional[Iterable[Union[InstrumentInfo, Dict[str, Any]]]] = None,
        errors: Optional[Mapping[str, Exception]] = None,
        directory_error: Optional[Exception] = None
    ):
        self.indices: Dict[str, List[IndexRecord]] = {
            name: [_coerce(IndexRecord, row) for row in rows]
            for name, rows in (indices or {}).items()
        }
        self.stocks: Dict[str, List[StockRecord]] = {
            symbol: [_coerce(StockRecord, row) for row in rows]
            for symbol, rows in (stocks or {}).items()
        }
        self.directory: List[InstrumentInfo] = [
            _coerce(InstrumentInfo, row) for row in (directory or [])
        ]
        self.errors: Dict[str, Exception] = dict(errors or {})
        self.directory_error = directory_error
        self.requests: List[tuple] = []

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryMarketDataSource":
        """
        Load a fixture file of the form::

            {"indices": {"Nifty Bank": [...]},
             "stocks": {"INFY": [...]},
             "directory": [...]}

        Rows use the upstream camelCase keys.
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            indices=data.get("indices"),
            stocks=data.get("stocks"),
            directory=data.get("directory"),
        )

    async def fetch_index_records(self, date_list: str, index_name: str) -> List[IndexRecord]:
        self.requests.append(("index", date_list, index_name))
        self._raise_if_configured(index_name)
        wanted = _query_dates(date_list)
        return [
            record for record in self.indices.get(index_name, [])
            if encode_for_query(record.trade_date) in wanted
        ]

    async def fetch_stock_records(self, date_list: str, symbol: str) -> List[StockRecord]:
        self.requests.append(("stock", date_list, symbol))
        self._raise_if_configured(symbol)
        wanted = _query_dates(date_list)
        return [
            record for record in self.stocks.get(symbol, [])
            if encode_for_query(record.trade_date) in wanted
        ]

    async def fetch_instrument_directory(self) -> List[InstrumentInfo]:
        self.requests.append(("directory", None, None))
        if self.directory_error is not None:
            raise self.directory_error
        return list(self.directory)

    def _raise_if_configured(self, instrument: str) -> None:
        error = self.errors.get(instrument)
        if error is not None:
            raise error


def _query_dates(date_list: str) -> set:
    return {part.strip() for part in date_list.split(",") if part.strip()}


def _coerce(model, row):
    if isinstance(row, model):
        return row
    return model.from_api(row)
