"""
Market Chooser - Nested Walk-Forward Market Selection with Drawdown Bounds

A backtesting toolkit for the best-of-N-markets rule:
- Performance criteria scoring each market's recent log prices
- Nested walk-forward: criteria compete out-of-sample, the winner picks the market
- Nested bootstrap bounds on future drawdown
"""

__version__ = "1.0.0"

# Core utilities
from market_chooser.config import Config
from market_chooser.exceptions import ChooserError, ConfigurationError, MarketDataError
from market_chooser.logging_config import setup_logging, get_logger

# Models
from market_chooser.models import Criterion, criterion

# Data
from market_chooser.data import PriceMatrix, build_price_matrix, load_markets

# Backtesting
from market_chooser.backtesting import (
    ChooserResult,
    DrawdownBootstrap,
    DrawdownBounds,
    WalkForwardEngine,
    WalkForwardResult,
    drawdown,
    drawdown_quantiles,
    find_quantile,
)

# Pipeline
from market_chooser.pipeline import run_chooser, run_chooser_on_matrix

__all__ = [
    # Version
    "__version__",
    # Config
    "Config",
    "setup_logging",
    "get_logger",
    # Errors
    "ChooserError",
    "ConfigurationError",
    "MarketDataError",
    # Models
    "Criterion",
    "criterion",
    # Data
    "PriceMatrix",
    "build_price_matrix",
    "load_markets",
    # Backtesting
    "ChooserResult",
    "DrawdownBootstrap",
    "DrawdownBounds",
    "WalkForwardEngine",
    "WalkForwardResult",
    "drawdown",
    "drawdown_quantiles",
    "find_quantile",
    # Pipeline
    "run_chooser",
    "run_chooser_on_matrix",
]
