"""
Three-Day Volume/Candle Pattern

Screens an instrument's three most recent daily records (anchor day first)
for the following setup:

- Volume rises strictly into the anchor day: day3 > day2 > day1
- The anchor day's candle points the opposite way to the previous day's
  candle, giving either bullish-then-bearish or bearish-then-bullish

The oldest day's candle direction is reported but does not gate the result.
"""

from typing import Sequence

from ..models.analysis import PatternType, PatternVerdict
from ..models.market_data import CandleType, DailyRecord

VOLUME_MISMATCH_REASON = (
    "volume pattern doesn't match (anchor date must have the highest volume, "
    "strictly decreasing backward)"
)
CANDLE_MISMATCH_REASON = "volume pattern correct but candle pattern doesn't match criteria"

_PASS_REASONS = {
    PatternType.BULLISH_THEN_BEARISH: (
        "Highest volume on anchor date (bullish), previous day bearish with lower volume"
    ),
    PatternType.BEARISH_THEN_BULLISH: (
        "Highest volume on anchor date (bearish), previous day bullish with lower volume"
    ),
}


class VolumeCandleEvaluator:
    """
    Stateless evaluator for the three-day volume/candle pattern.

    Callers are responsible for dropping instruments with fewer than three
    records; the evaluator only asserts the count.
    """

    def get_required_records(self) -> int:
        return 3

    def evaluate(self, records: Sequence[DailyRecord]) -> PatternVerdict:
        """
        Evaluate three records ordered newest-first.

        Args:
            records: Exactly three DailyRecord, anchor day first

        Returns:
            PatternVerdict with pass/fail, reason, pattern type (on pass)
            and the candle types of all three days
        """
        if len(records) != self.get_required_records():
            raise ValueError(
                f"Expected exactly {self.get_required_records()} records, got {len(records)}"
            )

        day3, day2, day1 = records
        candle_types = [day3.candle_type, day2.candle_type, day1.candle_type]

        if not (day3.volume > day2.volume > day1.volume):
            return PatternVerdict(
                passed=False,
                reason=VOLUME_MISMATCH_REASON,
                candle_types=candle_types
            )

        if day3.candle_type == day2.candle_type:
            return PatternVerdict(
                passed=False,
                reason=CANDLE_MISMATCH_REASON,
                candle_types=candle_types
            )

        if day3.candle_type == CandleType.BULLISH:
            pattern_type = PatternType.BULLISH_THEN_BEARISH
        else:
            pattern_type = PatternType.BEARISH_THEN_BULLISH

        return PatternVerdict(
            passed=True,
            reason=_PASS_REASONS[pattern_type],
            pattern_type=pattern_type,
            candle_types=candle_types
        )


_default_evaluator = VolumeCandleEvaluator()


def evaluate(records: Sequence[DailyRecord]) -> PatternVerdict:
    """Evaluate ``records`` with a shared VolumeCandleEvaluator."""
    return _default_evaluator.evaluate(records)
