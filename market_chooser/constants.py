"""
Centralized constants for the Market Chooser.

All magic numbers and hardcoded values should be defined here.
This makes the codebase more maintainable and self-documenting.
"""

from typing import Final, Tuple

# =============================================================================
# TRADING CALENDAR
# =============================================================================
TRADING_DAYS_PER_YEAR: Final[int] = 252

# Mean daily log return -> roughly annualized percent return
ANNUALIZATION_FACTOR: Final[float] = 100.0 * TRADING_DAYS_PER_YEAR  # 25200

# =============================================================================
# NUMERICS
# =============================================================================
# Floor for denominators that could vanish in the criteria
EPSILON: Final[float] = 1e-60

# =============================================================================
# WALK-FORWARD WINDOWS
# =============================================================================
MIN_IS_N: Final[int] = 2
MIN_OOS1_N: Final[int] = 1
MIN_MARKETS: Final[int] = 2
DEFAULT_IS_N: Final[int] = 1000
DEFAULT_OOS1_N: Final[int] = 100

# =============================================================================
# DRAWDOWN BOOTSTRAP
# =============================================================================
DEFAULT_N_TRADES: Final[int] = 252  # One year if daily prices
DEFAULT_BOOTSTRAP_REPS: Final[int] = 2000  # Should be at least this for good accuracy
DEFAULT_QUANTILE_REPS: Final[int] = 10000  # Should be at least this for good accuracy
DEFAULT_N_WORKERS: Final[int] = 1

# Synthetic paths drawn per block in the inner bootstrap; bounds peak memory
DRAWDOWN_CHUNK_ROWS: Final[int] = 1000

# Drawdown probability levels (rows of the bounds table)
DRAWDOWN_PROBABILITIES: Final[Tuple[float, ...]] = (0.001, 0.01, 0.05, 0.10)

# Position of each probability level in the sorted drawdowns (1 - p)
DRAWDOWN_QUANTILE_FRACTIONS: Final[Tuple[float, ...]] = (0.999, 0.99, 0.95, 0.90)

# Confidence in the bound (columns of the bounds table)
CONFIDENCE_LEVELS: Final[Tuple[float, ...]] = (0.5, 0.6, 0.7, 0.8, 0.9, 0.95)

# =============================================================================
# MARKET DATA
# =============================================================================
MIN_VALID_YEAR: Final[int] = 1800
MAX_VALID_YEAR: Final[int] = 2099

# Delimiters between fields of a market history record
DATE_FIELD_DELIMITERS: Final[str] = " ,\t"
PRICE_FIELD_DELIMITERS: Final[str] = " ,/\t"

# =============================================================================
# OUTPUT
# =============================================================================
DEFAULT_OUTPUT_DIR: Final[str] = "data/chooser"
DEFAULT_REPORT_FILE: Final[str] = "CHOOSER.LOG"
DEFAULT_LOG_DIR: Final[str] = "logs"
