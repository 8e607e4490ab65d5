"""
Drawdown Estimator
Worst peak-to-trough loss of a log-return path, and bootstrap bounds on it.

Trades are treated as log changes of equity. The equity curve starts at the
first trade, so the first trade anchors both the running sum and its running
maximum and can never contribute to the drawdown itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from market_chooser.constants import DRAWDOWN_CHUNK_ROWS, DRAWDOWN_QUANTILE_FRACTIONS


def log_drawdown(trades: Sequence[float]) -> float:
    """
    Largest drop of cumulative log equity below its running maximum.

    Args:
        trades: Log changes of equity, n >= 1

    Returns:
        Drawdown in log units (>= 0)
    """
    trades = np.asarray(trades, dtype=float)
    if trades.size == 0:
        raise ValueError("drawdown needs at least one trade")
    cumulative = np.cumsum(trades)
    running_max = np.maximum.accumulate(cumulative)
    return float((running_max - cumulative).max())


def to_percent(log_loss):
    """Convert a log-scale loss to percent drawdown."""
    return 100.0 * (1.0 - np.exp(-log_loss))


def drawdown(trades: Sequence[float]) -> float:
    """Percent drawdown of a path of log equity changes: 100 * (1 - exp(-dd))."""
    return float(to_percent(log_drawdown(trades)))


def drawdown_batch(paths: np.ndarray) -> np.ndarray:
    """
    Percent drawdown of each row of a (n_paths, n_trades) array.

    Identical to calling drawdown() on every row.
    """
    cumulative = np.cumsum(paths, axis=1)
    running_max = np.maximum.accumulate(cumulative, axis=1)
    return to_percent((running_max - cumulative).max(axis=1))


def quantile_index(n: int, frac: float) -> int:
    """
    Position of the frac quantile in n ascending values.

    Uses floor(frac * (n + 1)) - 1, clamped into [0, n - 1].
    """
    if n < 1:
        raise ValueError("quantile of an empty array")
    k = int(frac * (n + 1)) - 1
    return min(max(k, 0), n - 1)


def find_quantile(data: np.ndarray, frac: float) -> float:
    """
    Value at the frac quantile of data, which must already be sorted ascending.
    """
    return float(data[quantile_index(len(data), frac)])


@dataclass(frozen=True)
class DrawdownQuantiles:
    """Drawdown not exceeded with probability 1-p, for each tail probability p."""

    q001: float
    q01: float
    q05: float
    q10: float

    def as_tuple(self) -> tuple:
        """Values in DRAWDOWN_PROBABILITIES order (0.001, 0.01, 0.05, 0.10)."""
        return (self.q001, self.q01, self.q05, self.q10)


def drawdown_quantiles(
    changes: Sequence[float],
    n_trades: int,
    nboot: int,
    rng: Optional[np.random.Generator] = None,
    chunk_rows: int = DRAWDOWN_CHUNK_ROWS,
) -> DrawdownQuantiles:
    """
    Bootstrap the drawdown distribution of future n_trades-long paths.

    Each of nboot synthetic paths draws n_trades changes uniformly, with
    replacement, from the observed changes. Paths are generated chunk_rows
    at a time, so working memory stays at chunk_rows x n_trades whatever
    nboot is. The drawdowns are sorted and the worst 0.1%, 1%, 5% and 10%
    points are reported.

    Args:
        changes: Observed log changes (n_changes >= 1)
        n_trades: Length of each synthetic path
        nboot: Number of synthetic paths
        rng: Random generator (default: fresh unseeded generator)
        chunk_rows: Synthetic paths drawn per block

    Returns:
        DrawdownQuantiles, in percent
    """
    changes = np.asarray(changes, dtype=float)
    if changes.size == 0:
        raise ValueError("drawdown_quantiles needs at least one change")
    if n_trades < 1 or nboot < 1 or chunk_rows < 1:
        raise ValueError(
            f"n_trades, nboot and chunk_rows must be positive, "
            f"got {n_trades}, {nboot} and {chunk_rows}"
        )
    if rng is None:
        rng = np.random.default_rng()

    work = np.empty(nboot)
    for start in range(0, nboot, chunk_rows):
        stop = min(start + chunk_rows, nboot)
        picks = rng.integers(0, changes.size, size=(stop - start, n_trades))
        work[start:stop] = drawdown_batch(changes[picks])
    work.sort()

    return DrawdownQuantiles(
        *(find_quantile(work, frac) for frac in DRAWDOWN_QUANTILE_FRACTIONS)
    )
