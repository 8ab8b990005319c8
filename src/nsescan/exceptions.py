"""Screener error hierarchy.

Every error raised by nsescan inherits from ScreenerError so that the
orchestrators can isolate a failing instrument with a single except clause
and the CLI can translate run-level failures into an exit status.
"""

from typing import Optional


class ScreenerError(Exception):
    """Base class for all nsescan errors."""


class FetchError(ScreenerError):
    """A data request for one instrument failed (transport, status or timeout)."""

    def __init__(
        self,
        instrument: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        self.instrument = instrument
        self.status_code = status_code
        detail = f"HTTP {status_code}: {message}" if status_code is not None else message
        super().__init__(f"Fetch failed for {instrument}: {detail}")


class FormatError(ScreenerError, ValueError):
    """A date or numeric field from upstream does not parse."""


class InsufficientDataError(ScreenerError):
    """An instrument returned a record count below the path's requirement."""

    def __init__(self, instrument: str, got: int, required: str) -> None:
        self.instrument = instrument
        self.got = got
        self.required = required
        super().__init__(
            f"Insufficient data for {instrument}: got {got} records, expected {required}"
        )


class AnalysisFailure(ScreenerError):
    """The analysis run as a whole could not proceed."""


class SetupFailure(AnalysisFailure):
    """A one-time setup step of a run (e.g. the instrument directory) failed."""
