"""
Core Market Data Models

This module contains Pydantic models for the daily market data handled by
the screener:
- CandleType: Direction of a daily candle
- DailyRecord: Instrument-agnostic open/close/volume record used by the evaluator
- IndexRecord: Sector index row as returned by the upstream API
- StockRecord: Equity row as returned by the upstream API
- InstrumentInfo: Entry of the instrument directory (Nifty 50 constituents)

Upstream rows use camelCase keys; the models accept them through aliases and
expose snake_case attributes. Numeric fields may arrive as JSON numbers or as
strings and are parsed to Decimal.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator

from ..dates.codec import decode_display_date, parse_timestamp
from ..exceptions import FormatError


class CandleType(str, Enum):
    """Direction of a daily candle."""
    BULLISH = "bullish"
    BEARISH = "bearish"

    @classmethod
    def of(cls, open_value: Decimal, close_value: Decimal) -> 'CandleType':
        """Bullish iff the close exceeds the open; an unchanged close is bearish."""
        return cls.BULLISH if close_value > open_value else cls.BEARISH


def parse_decimal(v: Any) -> Optional[Decimal]:
    """Convert a JSON number or numeric string to Decimal."""
    if v is None or isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise ValueError(f"Invalid numeric value: {v!r}")
    if isinstance(v, str):
        v = v.strip().replace(",", "")
        if not v:
            raise ValueError("Empty numeric value")
    try:
        value = Decimal(str(v))
    except InvalidOperation as e:
        raise ValueError(f"Invalid numeric value: {v!r}") from e
    if not value.is_finite():
        raise ValueError(f"Non-finite numeric value: {v!r}")
    return value


def parse_optional_decimal(v: Any) -> Optional[Decimal]:
    """Like :func:`parse_decimal`, but placeholders such as ``"-"`` become None."""
    try:
        return parse_decimal(v)
    except ValueError:
        return None


def parse_volume(v: Any) -> int:
    """Convert a traded quantity to a whole number of units."""
    if isinstance(v, int) and not isinstance(v, bool):
        return v
    value = parse_decimal(v)
    if value is None or value != value.to_integral_value():
        raise ValueError(f"Volume must be a whole number: {v!r}")
    return int(value)


class UpstreamModel(BaseModel):
    """Base class for rows received from the data API."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )

    @classmethod
    def from_api(cls, data: Dict[str, Any]):
        """
        Validate one upstream row.

        Raises:
            FormatError: if a field is missing or does not parse
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise FormatError(f"Malformed {cls.__name__}: {e}") from e


class DailyRecord(BaseModel):
    """
    One trading day of an instrument, reduced to what the pattern needs.

    Instances are created fresh for every analysis run.
    """

    date: dt.date = Field(..., description="Trading day")
    open: Decimal = Field(..., description="Opening value", gt=0)
    close: Decimal = Field(..., description="Closing value", gt=0)
    volume: int = Field(..., description="Traded volume", ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator('open', 'close', mode='before')
    @classmethod
    def validate_price_fields(cls, v) -> Decimal:
        return parse_decimal(v)

    @field_validator('volume', mode='before')
    @classmethod
    def validate_volume(cls, v) -> int:
        return parse_volume(v)

    @computed_field
    @property
    def candle_type(self) -> CandleType:
        return CandleType.of(self.open, self.close)


class IndexRecord(UpstreamModel):
    """
    Sector index row.

    Matches the upstream ``/indice/by-dates-and-index`` format:
    {'indexName': ..., 'indexDate': 'DD-MM-YYYY', 'openIndexValue': ...,
     'closingIndexValue': ..., 'volume': ..., ...}
    """

    index_name: str = Field(..., alias="indexName", min_length=1)
    index_date: str = Field(..., alias="indexDate")
    open_index_value: Decimal = Field(..., alias="openIndexValue", gt=0)
    high_index_value: Optional[Decimal] = Field(None, alias="highIndexValue")
    low_index_value: Optional[Decimal] = Field(None, alias="lowIndexValue")
    closing_index_value: Decimal = Field(..., alias="closingIndexValue", gt=0)
    points_change: Optional[Decimal] = Field(None, alias="pointsChange")
    change_percent: Optional[Decimal] = Field(None, alias="changePercent")
    volume: int = Field(..., ge=0)
    turnover_rs_cr: Optional[Decimal] = Field(None, alias="turnoverRsCr")
    pe: Optional[Decimal] = None
    pb: Optional[Decimal] = None
    div_yield: Optional[Decimal] = Field(None, alias="divYield")

    @field_validator('open_index_value', 'closing_index_value', mode='before')
    @classmethod
    def validate_price_fields(cls, v) -> Decimal:
        return parse_decimal(v)

    @field_validator(
        'high_index_value', 'low_index_value', 'points_change', 'change_percent',
        'turnover_rs_cr', 'pe', 'pb', 'div_yield',
        mode='before'
    )
    @classmethod
    def validate_display_fields(cls, v) -> Optional[Decimal]:
        return parse_optional_decimal(v)

    @field_validator('volume', mode='before')
    @classmethod
    def validate_volume(cls, v) -> int:
        return parse_volume(v)

    @field_validator('index_date')
    @classmethod
    def validate_index_date(cls, v: str) -> str:
        decode_display_date(v)
        return v.strip()

    @property
    def trade_date(self) -> dt.date:
        return decode_display_date(self.index_date)

    def to_daily_record(self) -> DailyRecord:
        return DailyRecord(
            date=self.trade_date,
            open=self.open_index_value,
            close=self.closing_index_value,
            volume=self.volume,
        )


class StockRecord(UpstreamModel):
    """
    Equity row.

    Matches the upstream ``/stock/by-dates-and-symbol`` format:
    {'symbol': ..., 'openPrice': ..., 'closePrice': ..., 'ttlTrdQnty': ...,
     'ttlTrdVal': ..., 'timestamp': ISO-8601, ...}
    """

    symbol: str = Field(..., min_length=1)
    series: Optional[str] = None
    open_price: Decimal = Field(..., alias="openPrice", gt=0)
    high_price: Optional[Decimal] = Field(None, alias="highPrice")
    low_price: Optional[Decimal] = Field(None, alias="lowPrice")
    close_price: Decimal = Field(..., alias="closePrice", gt=0)
    last_price: Optional[Decimal] = Field(None, alias="lastPrice")
    prev_close_price: Optional[Decimal] = Field(None, alias="prevClosePrice")
    ttl_trd_qnty: int = Field(..., alias="ttlTrdQnty", ge=0)
    ttl_trd_val: Optional[Decimal] = Field(None, alias="ttlTrdVal")
    timestamp: dt.datetime
    isin_code: Optional[str] = Field(None, alias="isinCode")
    display_date: Optional[str] = Field(None, alias="date")

    @field_validator('open_price', 'close_price', mode='before')
    @classmethod
    def validate_price_fields(cls, v) -> Decimal:
        return parse_decimal(v)

    @field_validator(
        'high_price', 'low_price', 'last_price', 'prev_close_price', 'ttl_trd_val',
        mode='before'
    )
    @classmethod
    def validate_display_fields(cls, v) -> Optional[Decimal]:
        return parse_optional_decimal(v)

    @field_validator('ttl_trd_qnty', mode='before')
    @classmethod
    def validate_quantity(cls, v) -> int:
        return parse_volume(v)

    @field_validator('timestamp', mode='before')
    @classmethod
    def validate_timestamp(cls, v) -> dt.datetime:
        if isinstance(v, dt.datetime):
            return v
        return parse_timestamp(v)

    @property
    def trade_date(self) -> dt.date:
        return self.timestamp.date()

    def to_daily_record(self) -> DailyRecord:
        return DailyRecord(
            date=self.trade_date,
            open=self.open_price,
            close=self.close_price,
            volume=self.ttl_trd_qnty,
        )


class InstrumentInfo(UpstreamModel):
    """Instrument directory entry used to resolve display names."""

    symbol: str = Field(..., min_length=1)
    company_name: str = Field(..., alias="companyName")
    industry: Optional[str] = None
    isin_code: Optional[str] = Field(None, alias="isinCode")
