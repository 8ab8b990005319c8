"""
Shared fan-out/fan-in machinery for the analysis orchestrators.

Each instrument is fetched and evaluated in its own task. Tasks are bounded
by a semaphore, every fetch is bounded by a timeout, and results are
collected in request order regardless of completion order. A failure for
one instrument drops that instrument only; cancelling the run cancels every
in-flight fetch and no partial report is returned.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Awaitable, Iterable, Optional, TypeVar

from ..config import Config
from ..dates.business_days import analysis_window
from ..dates.codec import encode_query_window
from ..exceptions import FetchError, FormatError, InsufficientDataError
from ..logger import get_instrument_adapter, get_logger
from ..models.analysis import AnalysisReport, AnalysisRequest, Verdict
from ..strategies.volume_candle import VolumeCandleEvaluator
from ..datasource.base import MarketDataSource

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_CONCURRENCY = 5
DEFAULT_FETCH_TIMEOUT = 10.0


class AnalysisOrchestrator(ABC):
    """
    Base class for a screening run over a list of instruments.

    Subclasses implement :meth:`_analyze_instrument` and may override
    :meth:`_prepare` for one-time setup that is fatal when it fails.
    """

    kind = "analysis"

    def __init__(
        self,
        source: MarketDataSource,
        evaluator: Optional[VolumeCandleEvaluator] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        if fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {fetch_timeout}")

        self.source = source
        self.evaluator = evaluator or VolumeCandleEvaluator()
        self.max_concurrency = max_concurrency
        self.fetch_timeout = fetch_timeout

    @classmethod
    def from_config(cls, source: MarketDataSource, config: Config, **kwargs):
        """Build an orchestrator using the concurrency and timeout settings of ``config``."""
        return cls(
            source,
            max_concurrency=config.analysis.max_concurrency,
            fetch_timeout=config.datasource.timeout_seconds,
            **kwargs
        )

    async def run(self, anchor_date: date, instruments: Iterable[str]) -> AnalysisReport:
        """Screen ``instruments`` over the three business days ending at ``anchor_date``."""
        request = AnalysisRequest(anchor_date=anchor_date, instruments=list(instruments))
        return await self.analyze(request)

    async def analyze(self, request: AnalysisRequest) -> AnalysisReport:
        """
        Execute one run.

        Raises:
            AnalysisFailure: when run-level setup fails
        """
        window = analysis_window(request.anchor_date)
        date_list = encode_query_window(window)
        run_label = f"{self.kind}@{request.anchor_date.isoformat()}"

        logger.info(
            f"Starting {self.kind} run for {len(request.instruments)} instruments "
            f"over {date_list}"
        )

        context = await self._prepare(request)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(*[
            self._screen(semaphore, date_list, instrument, context, run_label)
            for instrument in request.instruments
        ])

        verdicts = [verdict for verdict in results if verdict is not None]
        report = AnalysisReport(
            anchor_date=request.anchor_date,
            window=window,
            verdicts=verdicts
        )

        logger.info(
            f"Finished {self.kind} run: {report.passed_count} passed, "
            f"{report.failed_count} failed, "
            f"{len(request.instruments) - len(verdicts)} omitted"
        )
        return report

    async def _prepare(self, request: AnalysisRequest) -> Any:
        """One-time setup; the returned value is handed to every instrument task."""
        return None

    @abstractmethod
    async def _analyze_instrument(
        self,
        date_list: str,
        instrument: str,
        context: Any,
        log
    ) -> Optional[Verdict]:
        """Fetch and evaluate one instrument; ``None`` leaves it out of the report."""
        ...

    async def _screen(
        self,
        semaphore: asyncio.Semaphore,
        date_list: str,
        instrument: str,
        context: Any,
        run_label: str
    ) -> Optional[Verdict]:
        log = get_instrument_adapter(logger, instrument=instrument, run=run_label)
        async with semaphore:
            try:
                return await self._analyze_instrument(date_list, instrument, context, log)
            except (FetchError, FormatError, InsufficientDataError) as e:
                log.warning(f"Skipping: {e}")
                return None
            except Exception as e:
                log.error(f"Unexpected error, skipping: {e}", exc_info=True)
                return None

    async def _fetch(self, call: Awaitable[T], instrument: str) -> T:
        """Await a data source call, converting a timeout into FetchError."""
        try:
            return await asyncio.wait_for(call, timeout=self.fetch_timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(
                instrument, f"no response within {self.fetch_timeout:g}s"
            ) from e

