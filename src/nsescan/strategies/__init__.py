"""
Screening strategies for nsescan.
"""

from .volume_candle import (
    CANDLE_MISMATCH_REASON,
    VOLUME_MISMATCH_REASON,
    VolumeCandleEvaluator,
    evaluate,
)

__all__ = [
    'CANDLE_MISMATCH_REASON',
    'VOLUME_MISMATCH_REASON',
    'VolumeCandleEvaluator',
    'evaluate',
]
