"""
Equity screening.

Unlike the sector path every stock with enough data is reported, passed or
failed, and the verdict carries all rows the API returned. The instrument
directory is fetched once per run to resolve company names; without it the
run cannot proceed.
"""

import asyncio
from typing import Any, Dict, Optional

from ..dates.business_days import WINDOW_SIZE
from ..exceptions import InsufficientDataError, ScreenerError, SetupFailure
from ..logger import get_logger
from ..models.analysis import AnalysisRequest, Verdict
from .base import AnalysisOrchestrator

logger = get_logger(__name__)


class StockAnalysisOrchestrator(AnalysisOrchestrator):
    """Screen individual equities and report every evaluated symbol."""

    kind = "stocks"

    async def _prepare(self, request: AnalysisRequest) -> Dict[str, str]:
        """Fetch the instrument directory as a symbol -> company name map."""
        try:
            directory = await asyncio.wait_for(
                self.source.fetch_instrument_directory(), timeout=self.fetch_timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("Instrument directory request timed out")
            raise SetupFailure(
                f"Instrument directory did not respond within {self.fetch_timeout:g}s"
            ) from e
        except ScreenerError as e:
            logger.error(f"Failed to fetch instrument directory: {e}")
            raise SetupFailure(f"Failed to fetch instrument directory: {e}") from e

        logger.debug(f"Loaded {len(directory)} directory entries")
        return {info.symbol: info.company_name for info in directory}

    async def _analyze_instrument(
        self,
        date_list: str,
        instrument: str,
        context: Any,
        log
    ) -> Optional[Verdict]:
        records = await self._fetch(
            self.source.fetch_stock_records(date_list, instrument), instrument
        )

        if len(records) < WINDOW_SIZE:
            raise InsufficientDataError(instrument, len(records), f"at least {WINDOW_SIZE}")

        ordered = sorted(records, key=lambda record: record.timestamp, reverse=True)
        daily = [record.to_daily_record() for record in ordered]

        verdict = self.evaluator.evaluate(daily[:WINDOW_SIZE])
        log.info(f"{'Passed' if verdict.passed else 'Failed'}: {verdict.reason}")

        display_name = context.get(instrument, instrument) if context else instrument
        return Verdict.from_pattern(instrument, display_name, daily, verdict)
