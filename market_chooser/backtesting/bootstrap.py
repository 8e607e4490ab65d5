"""
Bootstrap Report
Nested (double) bootstrap bounds on future drawdown.

The outer bootstrap resamples the realized OOS2 returns with replacement;
on each resample the inner bootstrap (drawdown_quantiles) estimates the
drawdown reached with probability 0.001, 0.01, 0.05 and 0.10 over a future
n_trades-long path. Sorting the outer estimates gives confidence levels for
each of those tail bounds: rows are drawdown probability, columns are
confidence in the bound.

Every outer repetition draws from its own child SeedSequence, so results
depend only on the seed, never on the number of workers.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from market_chooser.backtesting.drawdown import drawdown_quantiles, find_quantile
from market_chooser.constants import (
    CONFIDENCE_LEVELS,
    DEFAULT_BOOTSTRAP_REPS,
    DEFAULT_N_TRADES,
    DEFAULT_N_WORKERS,
    DEFAULT_QUANTILE_REPS,
    DRAWDOWN_PROBABILITIES,
)
from market_chooser.exceptions import ConfigurationError
from market_chooser.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class DrawdownBounds:
    """Drawdown bound table plus the sorted outer-bootstrap estimates behind it."""

    table: pd.DataFrame  # index: drawdown probability, columns: confidence
    samples: Dict[float, np.ndarray]  # probability -> sorted estimates (bootstrap_reps,)
    n_returns: int
    n_trades: int
    bootstrap_reps: int
    quantile_reps: int
    seed: Optional[int] = None

    def bound(self, probability: float, confidence: float) -> float:
        """Drawdown (percent) at a probability level, with the given confidence."""
        return float(self.table.loc[probability, confidence])

    def to_dict(self) -> Dict:
        """Nested dict {probability: {confidence: bound}} rounded for display."""
        return {
            str(prob): {str(conf): round(float(val), 3) for conf, val in row.items()}
            for prob, row in self.table.iterrows()
        }

    def format_table(self) -> str:
        """Fixed-width text rendering, one row per drawdown probability."""
        lines = ["Rows are drawdown probability, columns are confidence in bounds."]
        lines.append("       " + "".join(f"{conf:>10}" for conf in self.table.columns))
        for prob, row in self.table.iterrows():
            lines.append(f"{prob:<7}" + "".join(f"{val:>10.3f}" for val in row))
        return "\n".join(lines)


def bounds_table(
    samples: Dict[float, np.ndarray],
    confidence_levels: Sequence[float] = CONFIDENCE_LEVELS,
) -> pd.DataFrame:
    """
    Second-level quantile lookup on sorted outer-bootstrap estimates.

    Args:
        samples: Drawdown probability -> ascending estimates
        confidence_levels: Confidence levels for the columns

    Returns:
        DataFrame (probabilities x confidence levels)
    """
    data = [
        [find_quantile(samples[prob], conf) for conf in confidence_levels]
        for prob in samples
    ]
    table = pd.DataFrame(data, index=list(samples), columns=list(confidence_levels))
    table.index.name = "probability"
    table.columns.name = "confidence"
    return table


class DrawdownBootstrap:
    """
    Outer bootstrap over a realized return series.

    Usage:
        bootstrap = DrawdownBootstrap(n_trades=252, bootstrap_reps=2000, seed=42)
        bounds = bootstrap.run(result.oos2_returns())
        print(bounds.format_table())
    """

    def __init__(
        self,
        n_trades: int = DEFAULT_N_TRADES,
        bootstrap_reps: int = DEFAULT_BOOTSTRAP_REPS,
        quantile_reps: int = DEFAULT_QUANTILE_REPS,
        seed: Optional[int] = None,
        n_workers: int = DEFAULT_N_WORKERS,
    ):
        """
        Initialize the bootstrap.

        Args:
            n_trades: Length of a future trade path (252 = one year of days)
            bootstrap_reps: Outer repetitions (confidence axis)
            quantile_reps: Inner repetitions (probability axis)
            seed: Seed for reproducible results (None = fresh entropy)
            n_workers: Threads sharing the outer repetitions
        """
        if n_trades < 1 or bootstrap_reps < 1 or quantile_reps < 1 or n_workers < 1:
            raise ConfigurationError(
                "n_trades, bootstrap_reps, quantile_reps and n_workers must be positive"
            )
        self.n_trades = n_trades
        self.bootstrap_reps = bootstrap_reps
        self.quantile_reps = quantile_reps
        self.seed = seed
        self.n_workers = n_workers

    def _repetition(self, returns: np.ndarray, seed_seq: np.random.SeedSequence) -> Tuple[float, ...]:
        """One outer repetition: resample the returns, then run the inner bootstrap."""
        rng = np.random.default_rng(seed_seq)
        n = returns.size
        bootsample = returns[rng.integers(0, n, size=n)]
        quantiles = drawdown_quantiles(bootsample, self.n_trades, self.quantile_reps, rng=rng)
        return quantiles.as_tuple()

    def run(self, returns: Sequence[float], verbose: bool = True) -> DrawdownBounds:
        """
        Compute the drawdown bound table.

        Args:
            returns: Realized log returns (OOS2), at least one
            verbose: Show a progress bar

        Returns:
            DrawdownBounds
        """
        returns = np.asarray(returns, dtype=float)
        if returns.size == 0:
            raise ConfigurationError("Cannot bootstrap drawdown from an empty return series")
        if self.n_trades > returns.size:
            logger.warning(
                "n_trades (%d) exceeds the %d available returns; bounds extrapolate",
                self.n_trades, returns.size,
            )

        child_seeds = np.random.SeedSequence(self.seed).spawn(self.bootstrap_reps)
        estimates = np.empty((self.bootstrap_reps, len(DRAWDOWN_PROBABILITIES)))

        logger.info(
            "Doing bootstrap: %d outer x %d inner repetitions on %d returns, n_trades=%d",
            self.bootstrap_reps, self.quantile_reps, returns.size, self.n_trades,
        )

        progress = tqdm(total=self.bootstrap_reps, desc="Bootstrap", disable=not verbose)
        if self.n_workers == 1:
            for iboot, seed_seq in enumerate(child_seeds):
                estimates[iboot] = self._repetition(returns, seed_seq)
                progress.update()
        else:
            with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
                for iboot, values in enumerate(
                    executor.map(lambda s: self._repetition(returns, s), child_seeds)
                ):
                    estimates[iboot] = values
                    progress.update()
        progress.close()

        # Sort for CDF and find quantiles
        samples = {
            prob: np.sort(estimates[:, col])
            for col, prob in enumerate(DRAWDOWN_PROBABILITIES)
        }

        return DrawdownBounds(
            table=bounds_table(samples),
            samples=samples,
            n_returns=returns.size,
            n_trades=self.n_trades,
            bootstrap_reps=self.bootstrap_reps,
            quantile_reps=self.quantile_reps,
            seed=self.seed,
        )
