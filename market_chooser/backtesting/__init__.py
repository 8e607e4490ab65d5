"""
Backtesting Engine
Nested walk-forward simulation and bootstrap drawdown bounds.
"""

from .walk_forward import WalkForwardEngine, WalkForwardResult
from .drawdown import DrawdownQuantiles, drawdown, drawdown_quantiles, find_quantile
from .bootstrap import DrawdownBootstrap, DrawdownBounds
from .results import ChooserResult

__all__ = [
    'WalkForwardEngine',
    'WalkForwardResult',
    'DrawdownQuantiles',
    'drawdown',
    'drawdown_quantiles',
    'find_quantile',
    'DrawdownBootstrap',
    'DrawdownBounds',
    'ChooserResult',
]
