"""
Performance Criteria - scoring a window of log prices.

Each criterion is a pure function of a contiguous slice of one market's
log-price history (length n >= 2). Denominators that could vanish carry an
EPSILON floor, so degenerate windows (flat, all-winning, all-losing) score
finitely instead of raising.

The registry is closed: criteria are identified by their Criterion member
(or its integer index), and an unknown index is a configuration error.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Union

import numpy as np

from market_chooser.constants import EPSILON
from market_chooser.exceptions import ConfigurationError


def total_return(prices: np.ndarray) -> float:
    """Log return over the whole window."""
    return float(prices[-1] - prices[0])


def sharpe_ratio(prices: np.ndarray) -> float:
    """
    Raw Sharpe ratio of the single-step log returns in the window.

    Mean step return divided by the standard deviation of step returns
    (variance averaged over the n-1 steps, floored by EPSILON).
    """
    n_steps = len(prices) - 1
    mean = (prices[-1] - prices[0]) / n_steps
    diffs = np.diff(prices) - mean
    var = EPSILON + float(np.dot(diffs, diffs))
    return float(mean / np.sqrt(var / n_steps))


def profit_factor(prices: np.ndarray) -> float:
    """Sum of winning step returns over the absolute sum of losing ones."""
    rets = np.diff(prices)
    win_sum = EPSILON + float(rets[rets > 0.0].sum())
    lose_sum = EPSILON - float(rets[rets <= 0.0].sum())
    return win_sum / lose_sum


class Criterion(Enum):
    """Closed registry of market-selection criteria, in index order."""

    TOTAL_RETURN = 0
    SHARPE_RATIO = 1
    PROFIT_FACTOR = 2

    def __str__(self) -> str:
        return self.label

    @property
    def label(self) -> str:
        """Display name used in reports."""
        return _LABELS[self]

    @property
    def index(self) -> int:
        return self.value

    def score(self, prices: np.ndarray) -> float:
        """Score a window of log prices under this criterion."""
        return _FUNCTIONS[self](prices)

    @classmethod
    def from_index(cls, which: int) -> "Criterion":
        """
        Look up a criterion by integer index.

        Raises:
            ConfigurationError: If the index is not in the registry
        """
        try:
            return cls(which)
        except ValueError:
            raise ConfigurationError(
                f"Unknown criterion index {which}; valid indices are 0..{len(cls) - 1}"
            ) from None


_FUNCTIONS: Dict[Criterion, Callable[[np.ndarray], float]] = {
    Criterion.TOTAL_RETURN: total_return,
    Criterion.SHARPE_RATIO: sharpe_ratio,
    Criterion.PROFIT_FACTOR: profit_factor,
}

_LABELS: Dict[Criterion, str] = {
    Criterion.TOTAL_RETURN: "Total return",
    Criterion.SHARPE_RATIO: "Sharpe ratio",
    Criterion.PROFIT_FACTOR: "Profit factor",
}

N_CRITERIA = len(Criterion)


def criterion(which: Union[int, Criterion], prices: np.ndarray) -> float:
    """
    Master criterion function.

    Args:
        which: Criterion member or its integer index
        prices: Contiguous window of log prices, length >= 2. Not modified.

    Returns:
        Criterion score; higher is better

    Raises:
        ConfigurationError: Unknown criterion or window shorter than 2
    """
    if not isinstance(which, Criterion):
        which = Criterion.from_index(which)
    if len(prices) < 2:
        raise ConfigurationError(f"Criterion window needs at least 2 prices, got {len(prices)}")
    return which.score(np.asarray(prices, dtype=float))
