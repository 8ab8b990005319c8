"""
Market data sources for nsescan.

The HTTP client talks to the upstream NSE data API; the in-memory source
serves fixtures for tests and offline runs.
"""

from .base import MarketDataSource
from .client import ConnectionMonitor, HttpMarketDataSource
from .memory import InMemoryMarketDataSource

__all__ = [
    'MarketDataSource',
    'ConnectionMonitor',
    'HttpMarketDataSource',
    'InMemoryMarketDataSource',
]
