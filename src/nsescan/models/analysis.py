"""
Analysis request/result models.

Requests and reports are explicit values passed into and returned from the
orchestrators; nothing about a run is held in ambient state.
"""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from .market_data import CandleType, DailyRecord


class PatternType(str, Enum):
    """Accepted candle pairings of the anchor day and the day before it."""
    BULLISH_THEN_BEARISH = "bullish-then-bearish"
    BEARISH_THEN_BULLISH = "bearish-then-bullish"


class PatternVerdict(BaseModel):
    """
    Outcome of evaluating one instrument's three-day window.

    ``candle_types`` is ordered newest-first like the records it was
    derived from.
    """

    passed: bool
    reason: str = Field(..., min_length=1)
    pattern_type: Optional[PatternType] = None
    candle_types: List[CandleType] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_pattern_presence(self):
        if self.passed and self.pattern_type is None:
            raise ValueError("A passing verdict must carry a pattern type")
        if not self.passed and self.pattern_type is not None:
            raise ValueError("A failing verdict cannot carry a pattern type")
        return self


class Verdict(BaseModel):
    """
    Report entry for one instrument.

    ``records`` holds every record retrieved for the instrument,
    newest-first; the verdict itself was computed on the first three.
    """

    instrument_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    records: List[DailyRecord] = Field(..., min_length=3)
    passed: bool
    reason: str
    pattern_type: Optional[PatternType] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_verdict(self):
        if self.passed != (self.pattern_type is not None):
            raise ValueError("pattern_type must be present exactly when the verdict passed")
        dates = [record.date for record in self.records]
        if any(newer < older for newer, older in zip(dates, dates[1:])):
            raise ValueError("records must be ordered newest-first")
        return self

    @classmethod
    def from_pattern(
        cls,
        instrument_id: str,
        display_name: str,
        records: List[DailyRecord],
        verdict: PatternVerdict
    ) -> 'Verdict':
        return cls(
            instrument_id=instrument_id,
            display_name=display_name,
            records=records,
            passed=verdict.passed,
            reason=verdict.reason,
            pattern_type=verdict.pattern_type,
        )

    @computed_field
    @property
    def candle_types(self) -> List[CandleType]:
        return [record.candle_type for record in self.records[:3]]


class AnalysisRequest(BaseModel):
    """Anchor date plus the instruments to screen."""

    anchor_date: dt.date
    instruments: List[str] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator('instruments')
    @classmethod
    def normalize_instruments(cls, v: List[str]) -> List[str]:
        """Strip whitespace and drop duplicates, keeping first occurrence order."""
        seen = []
        for instrument in v:
            instrument = instrument.strip()
            if not instrument:
                raise ValueError("Instrument identifiers cannot be blank")
            if instrument not in seen:
                seen.append(instrument)
        return seen


class AnalysisReport(BaseModel):
    """Verdicts of one run, in the order the instruments were requested."""

    anchor_date: dt.date
    window: List[dt.date] = Field(..., min_length=1)
    verdicts: List[Verdict] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> List[Verdict]:
        return [v for v in self.verdicts if v.passed]

    @property
    def failed(self) -> List[Verdict]:
        return [v for v in self.verdicts if not v.passed]

    @computed_field
    @property
    def passed_count(self) -> int:
        return len(self.passed)

    @computed_field
    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def instrument_ids(self) -> List[str]:
        return [v.instrument_id for v in self.verdicts]
