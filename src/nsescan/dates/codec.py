"""
Date string encodings used by the upstream NSE data API.

The API speaks two different date dialects and both are kept as-is:

- query dates: zero-padded ``DDMMYYYY`` digits, comma-joined in the
  ``dates`` query parameter (``05012024,04012024,03012024``)
- display dates: ``DD-MM-YYYY`` on fetched index records (``05-01-2024``)

Stock records carry an ISO-8601 ``timestamp`` instead, see
:func:`parse_timestamp`.
"""

import re
from datetime import date, datetime, timezone
from typing import Iterable

from ..exceptions import FormatError

_QUERY_DATE = re.compile(r"^(\d{2})(\d{2})(\d{4})$")
_DISPLAY_DATE = re.compile(r"^(\d{1,2})([-/.])(\d{1,2})\2(\d{4})$")


def encode_for_query(day: date) -> str:
    """Encode ``day`` as ``DDMMYYYY`` (2024-01-05 -> ``05012024``)."""
    return f"{day.day:02d}{day.month:02d}{day.year:04d}"


def encode_query_window(days: Iterable[date]) -> str:
    """Comma-join query encodings, preserving the given order."""
    return ",".join(encode_for_query(day) for day in days)


def decode_query_date(raw: str) -> date:
    """Inverse of :func:`encode_for_query`."""
    match = _QUERY_DATE.match(raw.strip()) if isinstance(raw, str) else None
    if not match:
        raise FormatError(f"Invalid query date {raw!r}, expected DDMMYYYY")
    day, month, year = match.groups()
    return _build_date(raw, int(year), int(month), int(day))


def decode_display_date(raw: str) -> date:
    """
    Parse a ``DD-MM-YYYY`` display date.

    The day, month and year components are reversed into ``YYYY-MM-DD``
    before parsing. ``/`` and ``.`` are accepted as separators as long as
    both separators match.

    Raises:
        FormatError: if ``raw`` is not in the expected pattern or is not a
            calendar date
    """
    match = _DISPLAY_DATE.match(raw.strip()) if isinstance(raw, str) else None
    if not match:
        raise FormatError(f"Invalid display date {raw!r}, expected DD-MM-YYYY")
    day, _, month, year = match.groups()
    iso = "-".join([year, month.zfill(2), day.zfill(2)])
    try:
        return date.fromisoformat(iso)
    except ValueError as e:
        raise FormatError(f"Invalid display date {raw!r}: {e}") from e


def format_display_date(day: date) -> str:
    """Format ``day`` as ``DD-MM-YYYY``."""
    return f"{day.day:02d}-{day.month:02d}-{day.year:04d}"


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an absolute ISO-8601 timestamp into an aware datetime.

    The upstream offset is kept so that ``.date()`` is the exchange trading
    day; naive timestamps are taken to be UTC.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise FormatError(f"Invalid timestamp {raw!r}")
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError as e:
        raise FormatError(f"Invalid timestamp {raw!r}: {e}") from e

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _build_date(raw: str, year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError as e:
        raise FormatError(f"Invalid date {raw!r}: {e}") from e
