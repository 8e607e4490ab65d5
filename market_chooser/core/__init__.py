"""
Core utilities for the Market Chooser.

- Timing utilities (Timer)
"""

from market_chooser.core.timing import Timer

__all__ = [
    "Timer",
]
