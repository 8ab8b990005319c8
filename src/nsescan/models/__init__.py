"""
Pydantic models for nsescan.

Market data rows received from the upstream API and the request/report
values exchanged with the analysis orchestrators.
"""

from .market_data import (
    CandleType,
    DailyRecord,
    IndexRecord,
    InstrumentInfo,
    StockRecord,
    parse_decimal,
    parse_optional_decimal,
    parse_volume,
)
from .analysis import (
    AnalysisReport,
    AnalysisRequest,
    PatternType,
    PatternVerdict,
    Verdict,
)

__all__ = [
    # Market data
    "CandleType",
    "DailyRecord",
    "IndexRecord",
    "InstrumentInfo",
    "StockRecord",
    "parse_decimal",
    "parse_optional_decimal",
    "parse_volume",

    # Analysis
    "AnalysisReport",
    "AnalysisRequest",
    "PatternType",
    "PatternVerdict",
    "Verdict",
]
