"""
Analysis orchestrators: drive the volume/candle evaluator across sector
indices or individual equities.
"""

from .base import AnalysisOrchestrator
from .sector import SectorAnalysisOrchestrator
from .stock import StockAnalysisOrchestrator

__all__ = [
    'AnalysisOrchestrator',
    'SectorAnalysisOrchestrator',
    'StockAnalysisOrchestrator',
]
