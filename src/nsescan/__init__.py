"""
nsescan: NSE Volume/Candle Pattern Screener

Screens NSE sector indices and individual equities for a three-day setup:
strictly rising volume into the anchor date together with a reversal of the
anchor day's candle against the day before.
"""

__version__ = "0.1.0"
__author__ = "nsescan Team"
__description__ = "NSE three-day volume/candle pattern screener"

# Package-level imports for convenience
from .config import Config
from .logger import get_logger

__all__ = ["Config", "get_logger", "__version__"]
