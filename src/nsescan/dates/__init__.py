"""
Calendar helpers: business day stepping and the upstream date codecs.
"""

from .business_days import (
    Direction,
    WINDOW_SIZE,
    analysis_window,
    is_business_day,
    navigate,
    previous_business_days,
    step,
)
from .codec import (
    decode_display_date,
    decode_query_date,
    encode_for_query,
    encode_query_window,
    format_display_date,
    parse_timestamp,
)

__all__ = [
    'Direction',
    'WINDOW_SIZE',
    'analysis_window',
    'is_business_day',
    'navigate',
    'previous_business_days',
    'step',
    'decode_display_date',
    'decode_query_date',
    'encode_for_query',
    'encode_query_window',
    'format_display_date',
    'parse_timestamp',
]
