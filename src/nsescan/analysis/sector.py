"""
Sector index screening.

Only sectors that pass the pattern are reported. The index API is expected
to return exactly one row per requested date, so any other row count means
the window is incomplete and the sector is left out.
"""

from datetime import date
from typing import Any, Iterable, List, Optional

from ..config import DEFAULT_SECTORS
from ..dates.business_days import WINDOW_SIZE
from ..exceptions import InsufficientDataError
from ..models.analysis import AnalysisReport, Verdict
from .base import AnalysisOrchestrator


class SectorAnalysisOrchestrator(AnalysisOrchestrator):
    """Screen NSE sector indices and report the ones that pass."""

    kind = "sectors"

    def __init__(self, *args, sectors: Optional[List[str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.sectors = list(sectors or DEFAULT_SECTORS)

    @classmethod
    def from_config(cls, source, config, **kwargs):
        kwargs.setdefault("sectors", config.analysis.sectors)
        return super().from_config(source, config, **kwargs)

    async def run(
        self,
        anchor_date: date,
        sector_names: Optional[Iterable[str]] = None
    ) -> AnalysisReport:
        """
        Screen ``sector_names`` (the configured sector list when omitted).

        Sectors whose data is missing, incomplete or fails to fetch are
        omitted, as are sectors that fail the pattern.
        """
        if sector_names is None:
            sector_names = self.sectors
        return await super().run(anchor_date, sector_names)

    async def _analyze_instrument(
        self,
        date_list: str,
        instrument: str,
        context: Any,
        log
    ) -> Optional[Verdict]:
        records = await self._fetch(
            self.source.fetch_index_records(date_list, instrument), instrument
        )

        if len(records) != WINDOW_SIZE:
            raise InsufficientDataError(instrument, len(records), f"exactly {WINDOW_SIZE}")

        ordered = sorted(records, key=lambda record: record.trade_date, reverse=True)
        daily = [record.to_daily_record() for record in ordered]

        verdict = self.evaluator.evaluate(daily)
        if not verdict.passed:
            log.debug(f"Not reported: {verdict.reason}")
            return None

        log.info(f"Matched {verdict.pattern_type.value}")
        return Verdict.from_pattern(instrument, instrument, daily, verdict)
