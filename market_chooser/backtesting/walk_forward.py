"""
Walk-Forward Engine
Nested walk-forward simulation of the best-of-N-markets rule.

At each bar, every criterion picks the market that scored best over the
trailing in-sample window, and the next bar's return of that pick is
recorded in the criterion's OOS1 series. Once OOS1 holds OOS1_n decisions,
the criterion with the best OOS1 total is used to pick the market that is
actually held for the next bar; those returns form the OOS2 series.

Window bookkeeping (all indices into the aligned price matrix):
    IS_start   - first case of the current in-sample window
    OOS1_start - first case of the current OOS1 window (advances with it)
    OOS1_end   - one past the last OOS1 case; also the current OOS1 case
    OOS2_start - first OOS2 case; fixed at IS_n + OOS1_n
    OOS2_end   - one past the last OOS2 case; also the current OOS2 case
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from market_chooser.config import Config
from market_chooser.constants import ANNUALIZATION_FACTOR
from market_chooser.data.price_matrix import PriceMatrix
from market_chooser.exceptions import ConfigurationError
from market_chooser.logging_config import get_logger
from market_chooser.models.criteria import Criterion

logger = get_logger(__name__)


@dataclass
class WalkForwardResult:
    """Output of one walk-forward pass."""

    criteria: Tuple[Criterion, ...]
    market_names: Tuple[str, ...]
    n_cases: int
    is_n: int
    oos1_n: int

    # Dense per-case series; NaN / -1 where nothing was recorded
    oos1: np.ndarray  # (n_criteria, n_cases) return of each criterion's pick
    oos2: np.ndarray  # (n_cases,) realized strategy return
    oos1_choices: np.ndarray  # (n_criteria, n_cases) market picked by each criterion
    best_criterion: np.ndarray  # (n_cases,) criterion used on each OOS2 case
    oos2_choices: np.ndarray  # (n_cases,) market held on each OOS2 case
    criterion_counts: np.ndarray  # (n_criteria,) times each criterion was best

    # Final cursor positions
    is_start: int
    oos1_start: int
    oos1_end: int
    oos2_start: int
    oos2_end: int

    market_performance: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    annualization_factor: float = ANNUALIZATION_FACTOR

    @property
    def n_oos1(self) -> int:
        """Number of OOS1 cases recorded per criterion."""
        return self.oos1_end - self.is_n + 1

    @property
    def n_oos2(self) -> int:
        """Number of realized OOS2 returns."""
        return self.oos2_end - self.oos2_start

    def oos2_returns(self) -> np.ndarray:
        """Realized strategy returns, in time order."""
        return self.oos2[self.oos2_start:self.oos2_end].copy()

    def oos2_series(self, dates: Optional[pd.DatetimeIndex] = None) -> pd.Series:
        """Realized strategy returns as a Series, dated when dates are given."""
        index = dates[self.oos2_start:self.oos2_end] if dates is not None else None
        return pd.Series(self.oos2_returns(), index=index, name="oos2")

    def criterion_performance(self) -> pd.Series:
        """
        Annualized mean OOS1 return of each criterion.

        Computed over the OOS2 cases only, so it is commensurate with the
        final system's performance.
        """
        window = self.oos1[:, self.oos2_start:self.oos2_end]
        perf = self.annualization_factor * window.sum(axis=1) / self.n_oos2
        return pd.Series(perf, index=[c.label for c in self.criteria], name="performance")

    def criterion_pct_chosen(self) -> pd.Series:
        """Percent of OOS2 cases on which each criterion was the best."""
        pct = 100.0 * self.criterion_counts / self.criterion_counts.sum()
        return pd.Series(pct, index=[c.label for c in self.criteria], name="pct_chosen")

    def final_performance(self) -> float:
        """Annualized mean return of the final system (OOS2)."""
        return float(self.annualization_factor * self.oos2_returns().mean())


class WalkForwardEngine:
    """
    Single forward pass over an aligned price matrix.

    Features:
    - Strictly causal: each pick uses only prices up to the day before the
      return it earns
    - Greedy arg-max selection; ties go to the lowest market / criterion index
    - Scores for a window are computed once and reused by the next step
    """

    def __init__(
        self,
        matrix: PriceMatrix,
        is_n: int,
        oos1_n: int,
        criteria: Sequence[Union[int, Criterion]] = tuple(Criterion),
        annualization_factor: float = ANNUALIZATION_FACTOR,
    ):
        """
        Initialize walk-forward engine.

        Args:
            matrix: Aligned log prices
            is_n: In-sample window length (>= 2)
            oos1_n: Number of OOS1 cases used to choose the best criterion (>= 1)
            criteria: Criteria competing in OOS1, in index order
            annualization_factor: Multiplier turning mean daily log return into
                annualized percent

        Raises:
            ConfigurationError: Invalid windows, too few markets or cases,
                or an unknown criterion
        """
        Config(is_n=is_n, oos1_n=oos1_n).validate_for(matrix.n_cases, matrix.n_markets)

        self.matrix = matrix
        self.is_n = is_n
        self.oos1_n = oos1_n
        self.criteria = tuple(
            c if isinstance(c, Criterion) else Criterion.from_index(c) for c in criteria
        )
        if not self.criteria:
            raise ConfigurationError("At least one criterion is required")
        self.annualization_factor = annualization_factor

        # One contiguous row per market for fast window slicing
        self._close = np.ascontiguousarray(matrix.log_prices.T)
        self._cached_end: Optional[int] = None
        self._cached_scores: Optional[np.ndarray] = None

    def _score_window(self, window_end: int) -> np.ndarray:
        """
        Score every market under every criterion for the IS_n cases ending
        just before window_end.

        Returns:
            Array of shape (n_criteria, n_markets)
        """
        if window_end != self._cached_end:
            start = window_end - self.is_n
            scores = np.empty((len(self.criteria), self.matrix.n_markets))
            for icrit, crit in enumerate(self.criteria):
                for imarket in range(self.matrix.n_markets):
                    scores[icrit, imarket] = crit.score(self._close[imarket, start:window_end])
            self._cached_end = window_end
            self._cached_scores = scores
        return self._cached_scores

    def _next_return(self, imarket: int, icase: int) -> float:
        """Log return of a market from case icase-1 to icase."""
        return float(self._close[imarket, icase] - self._close[imarket, icase - 1])

    def market_oos2_performance(self) -> pd.Series:
        """
        Annualized mean return of each market over the OOS2 period.

        The first OOS2 return is relative to case OOS2_start - 1.
        """
        n_cases = self.matrix.n_cases
        oos2_start = self.is_n + self.oos1_n
        close = self._close
        perf = self.annualization_factor * (close[:, n_cases - 1] - close[:, oos2_start - 1]) \
            / (n_cases - oos2_start)
        return pd.Series(perf, index=list(self.matrix.names), name="performance")

    def run(self) -> WalkForwardResult:
        """
        Execute the walk-forward pass.

        Returns:
            WalkForwardResult with OOS1/OOS2 series and criterion counts
        """
        n_cases = self.matrix.n_cases
        n_criteria = len(self.criteria)

        oos1 = np.full((n_criteria, n_cases), np.nan)
        oos2 = np.full(n_cases, np.nan)
        oos1_choices = np.full((n_criteria, n_cases), -1, dtype=int)
        best_criterion = np.full(n_cases, -1, dtype=int)
        oos2_choices = np.full(n_cases, -1, dtype=int)
        crit_count = np.zeros(n_criteria, dtype=int)

        is_start = 0
        oos1_start = oos1_end = self.is_n  # First OOS1 case is right after first IS window
        oos2_start = oos2_end = self.is_n + self.oos1_n  # Right after first complete OOS1

        logger.info(
            "Computing trades: %d cases, %d markets, IS_n=%d, OOS1_n=%d",
            n_cases, self.matrix.n_markets, self.is_n, self.oos1_n,
        )

        while True:
            # For each criterion find the best market over the IS window
            # and save the return of the next case
            scores = self._score_window(is_start + self.is_n)
            for icrit in range(n_criteria):
                ibest = int(np.argmax(scores[icrit]))
                oos1_choices[icrit, oos1_end] = ibest
                oos1[icrit, oos1_end] = self._next_return(ibest, oos1_end)

            if oos1_end >= n_cases - 1:
                break  # No case left for OOS2

            is_start += 1
            oos1_end += 1

            if oos1_end - oos1_start < self.oos1_n:
                continue  # Still filling OOS1

            # OOS1_end now points one past what we have in OOS1
            crit_sums = oos1[:, oos1_start:oos1_end].sum(axis=1)
            ibestcrit = int(np.argmax(crit_sums))
            crit_count[ibestcrit] += 1

            scores = self._score_window(oos2_end)
            ibest = int(np.argmax(scores[ibestcrit]))

            # Strictly long: long some market every bar
            oos2[oos2_end] = self._next_return(ibest, oos2_end)
            best_criterion[oos2_end] = ibestcrit
            oos2_choices[oos2_end] = ibest

            logger.debug(
                "Case %d: best criterion %s, holding %s, return %.6f",
                oos2_end, self.criteria[ibestcrit], self.matrix.names[ibest], oos2[oos2_end],
            )

            oos1_start += 1
            oos2_end += 1

        assert oos1_end == n_cases - 1
        assert oos2_end == n_cases
        assert oos1_end == is_start + self.is_n
        assert oos1_end - oos1_start == self.oos1_n - 1

        result = WalkForwardResult(
            criteria=self.criteria,
            market_names=self.matrix.names,
            n_cases=n_cases,
            is_n=self.is_n,
            oos1_n=self.oos1_n,
            oos1=oos1,
            oos2=oos2,
            oos1_choices=oos1_choices,
            best_criterion=best_criterion,
            oos2_choices=oos2_choices,
            criterion_counts=crit_count,
            is_start=is_start,
            oos1_start=oos1_start,
            oos1_end=oos1_end,
            oos2_start=oos2_start,
            oos2_end=oos2_end,
            market_performance=self.market_oos2_performance(),
            annualization_factor=self.annualization_factor,
        )

        logger.info(
            "Walk-forward complete: %d OOS2 returns, final system %.4f",
            result.n_oos2, result.final_performance(),
        )
        return result
