"""Unit tests for the walk-forward engine."""

import numpy as np
import pytest

from conftest import random_walk_matrix
from market_chooser.backtesting.walk_forward import WalkForwardEngine
from market_chooser.constants import ANNUALIZATION_FACTOR
from market_chooser.data.price_matrix import PriceMatrix
from market_chooser.exceptions import ConfigurationError
from market_chooser.models.criteria import Criterion


def reference_walk_forward(log_prices, is_n, oos1_n):
    """
    Straightforward day-by-day rendition of the selection rule, used to
    cross-check the engine's cursor bookkeeping.

    Returns:
        (oos2 returns, best criterion per OOS2 day, market per OOS2 day)
    """
    n_cases, n_markets = log_prices.shape
    criteria = list(Criterion)

    def best_market(crit, window_end):
        scores = [crit.score(log_prices[window_end - is_n:window_end, m]) for m in range(n_markets)]
        best, best_score = 0, scores[0]
        for m in range(1, n_markets):
            if scores[m] > best_score:
                best, best_score = m, scores[m]
        return best

    # Return of each criterion's pick on every day that has a full IS window behind it
    oos1 = {}
    for day in range(is_n, n_cases):
        for icrit, crit in enumerate(criteria):
            m = best_market(crit, day)
            oos1[icrit, day] = log_prices[day, m] - log_prices[day - 1, m]

    returns, crits, markets = [], [], []
    for day in range(is_n + oos1_n, n_cases):
        sums = [sum(oos1[icrit, d] for d in range(day - oos1_n, day)) for icrit in range(len(criteria))]
        best_crit = 0
        for icrit in range(1, len(criteria)):
            if sums[icrit] > sums[best_crit]:
                best_crit = icrit
        m = best_market(criteria[best_crit], day)
        returns.append(log_prices[day, m] - log_prices[day - 1, m])
        crits.append(best_crit)
        markets.append(m)
    return np.array(returns), np.array(crits), np.array(markets)


class TestWalkForwardDominantMarket:
    """A market that wins every criterion on every window."""

    def test_always_selects_dominant_market(self, dominant_matrix):
        result = WalkForwardEngine(dominant_matrix, is_n=10, oos1_n=5).run()

        recorded = result.oos1_choices[:, result.is_n:]
        assert (recorded == 0).all()

        held = result.oos2_choices[result.oos2_start:result.oos2_end]
        assert len(held) == result.n_oos2
        assert (held == 0).all()

    def test_counts_sum_to_oos2_steps(self, dominant_matrix):
        result = WalkForwardEngine(dominant_matrix, is_n=10, oos1_n=5).run()
        assert result.criterion_counts.sum() == result.n_oos2

    def test_criterion_ties_go_to_lowest_index(self, dominant_matrix):
        """Every criterion earns the same OOS1 returns, so the first one always wins."""
        result = WalkForwardEngine(dominant_matrix, is_n=10, oos1_n=5).run()
        assert list(result.criterion_counts) == [result.n_oos2, 0, 0]
        assert result.criterion_pct_chosen().iloc[0] == pytest.approx(100.0)

    def test_oos2_returns_are_dominant_market_returns(self, dominant_matrix):
        result = WalkForwardEngine(dominant_matrix, is_n=10, oos1_n=5).run()
        market_a = dominant_matrix.market(0)
        expected = np.diff(market_a)[result.oos2_start - 1:]
        np.testing.assert_allclose(result.oos2_returns(), expected)


class TestWalkForwardTies:
    """Identical markets must resolve to the lowest index."""

    def test_identical_markets(self):
        base = random_walk_matrix(80, 1, seed=5).log_prices[:, 0]
        matrix = PriceMatrix.from_log_prices(np.column_stack([base, base, base]))
        result = WalkForwardEngine(matrix, is_n=10, oos1_n=4).run()

        assert (result.oos1_choices[:, result.is_n:] == 0).all()
        assert (result.oos2_choices[result.oos2_start:] == 0).all()


class TestWalkForwardCursors:
    """Cursor invariants for arbitrary valid window sizes."""

    @pytest.mark.parametrize(
        "n_cases,is_n,oos1_n",
        [
            (4, 2, 1),
            (10, 2, 1),
            (30, 5, 24),
            (60, 10, 7),
            (120, 50, 20),
            (200, 2, 150),
        ],
    )
    def test_final_cursors(self, n_cases, is_n, oos1_n):
        matrix = random_walk_matrix(n_cases, 3, seed=n_cases)
        result = WalkForwardEngine(matrix, is_n=is_n, oos1_n=oos1_n).run()

        assert result.oos1_end == n_cases - 1
        assert result.oos2_end == n_cases
        assert result.oos2_start == is_n + oos1_n
        assert result.oos1_end == result.is_start + is_n
        assert result.n_oos2 == n_cases - is_n - oos1_n
        assert result.n_oos1 == n_cases - is_n
        assert result.criterion_counts.sum() == result.n_oos2

    def test_series_fill_pattern(self):
        """OOS1 is filled from IS_n on, OOS2 from IS_n + OOS1_n on, nothing before."""
        matrix = random_walk_matrix(90, 4, seed=2)
        result = WalkForwardEngine(matrix, is_n=12, oos1_n=8).run()

        assert np.isnan(result.oos1[:, :12]).all()
        assert np.isfinite(result.oos1[:, 12:]).all()
        assert np.isnan(result.oos2[:20]).all()
        assert np.isfinite(result.oos2[20:]).all()
        assert (result.best_criterion[:20] == -1).all()
        assert (result.best_criterion[20:] >= 0).all()


class TestWalkForwardAgainstReference:
    """The engine must reproduce a direct day-by-day rendition of the rule."""

    @pytest.mark.parametrize("is_n,oos1_n", [(2, 1), (15, 10), (40, 5)])
    def test_matches_reference(self, is_n, oos1_n):
        matrix = random_walk_matrix(150, 4, seed=is_n)
        result = WalkForwardEngine(matrix, is_n=is_n, oos1_n=oos1_n).run()

        returns, crits, markets = reference_walk_forward(matrix.log_prices, is_n, oos1_n)

        np.testing.assert_allclose(result.oos2_returns(), returns)
        np.testing.assert_array_equal(result.best_criterion[result.oos2_start:], crits)
        np.testing.assert_array_equal(result.oos2_choices[result.oos2_start:], markets)
        np.testing.assert_array_equal(
            result.criterion_counts, np.bincount(crits, minlength=len(Criterion))
        )


class TestNoLookahead:
    """Changing future prices must not change past decisions."""

    def test_future_prices_do_not_leak(self):
        matrix = random_walk_matrix(200, 3, seed=21)
        k = 150
        altered = matrix.log_prices.copy()
        altered[k:] += np.random.default_rng(0).normal(0.0, 0.05, size=altered[k:].shape).cumsum(axis=0)
        altered_matrix = PriceMatrix.from_log_prices(altered, names=matrix.names)

        base = WalkForwardEngine(matrix, is_n=30, oos1_n=10).run()
        other = WalkForwardEngine(altered_matrix, is_n=30, oos1_n=10).run()

        # The pick held on day k only uses prices through day k - 1
        np.testing.assert_array_equal(base.oos2_choices[:k + 1], other.oos2_choices[:k + 1])
        np.testing.assert_array_equal(base.best_criterion[:k + 1], other.best_criterion[:k + 1])
        np.testing.assert_allclose(base.oos2[40:k], other.oos2[40:k])


class TestWalkForwardSummaries:
    """Annualized summaries reported for each run."""

    def test_final_performance(self, random_matrix):
        result = WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        expected = ANNUALIZATION_FACTOR * result.oos2_returns().mean()
        assert result.final_performance() == pytest.approx(expected)

    def test_market_performance(self, random_matrix):
        result = WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        close = random_matrix.log_prices
        expected = ANNUALIZATION_FACTOR * (close[-1] - close[69]) / 430
        np.testing.assert_allclose(result.market_performance.to_numpy(), expected)
        assert list(result.market_performance.index) == ["MKT0", "MKT1", "MKT2"]

    def test_criterion_performance_uses_oos2_days(self, random_matrix):
        result = WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        expected = ANNUALIZATION_FACTOR * result.oos1[:, 70:].mean(axis=1)
        np.testing.assert_allclose(result.criterion_performance().to_numpy(), expected)
        assert list(result.criterion_performance().index) == [
            "Total return", "Sharpe ratio", "Profit factor"
        ]

    def test_pct_chosen_sums_to_100(self, random_matrix):
        result = WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        assert result.criterion_pct_chosen().sum() == pytest.approx(100.0)

    def test_oos2_series_dated(self, random_matrix):
        result = WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        series = result.oos2_series(random_matrix.dates)
        assert len(series) == 430
        assert series.index[0] == random_matrix.dates[70]

    def test_matrix_untouched(self, random_matrix):
        before = random_matrix.log_prices.copy()
        WalkForwardEngine(random_matrix, is_n=50, oos1_n=20).run()
        np.testing.assert_array_equal(random_matrix.log_prices, before)


class TestWalkForwardConfiguration:
    """Configuration errors are raised before any simulation."""

    def test_is_n_too_small(self, random_matrix):
        with pytest.raises(ConfigurationError, match="IS_n"):
            WalkForwardEngine(random_matrix, is_n=1, oos1_n=5)

    def test_oos1_n_too_small(self, random_matrix):
        with pytest.raises(ConfigurationError, match="OOS1_n"):
            WalkForwardEngine(random_matrix, is_n=10, oos1_n=0)

    def test_not_enough_cases(self):
        matrix = random_walk_matrix(30, 2)
        with pytest.raises(ConfigurationError, match="trading days"):
            WalkForwardEngine(matrix, is_n=20, oos1_n=10)

    def test_minimum_cases_yield_one_oos2_return(self):
        matrix = random_walk_matrix(31, 2)
        result = WalkForwardEngine(matrix, is_n=20, oos1_n=10).run()
        assert result.n_oos2 == 1

    def test_single_market_rejected(self):
        matrix = random_walk_matrix(50, 1)
        with pytest.raises(ConfigurationError, match="markets"):
            WalkForwardEngine(matrix, is_n=10, oos1_n=5)

    def test_unknown_criterion(self, random_matrix):
        with pytest.raises(ConfigurationError, match="Unknown criterion"):
            WalkForwardEngine(random_matrix, is_n=10, oos1_n=5, criteria=[0, 7])

    def test_empty_criteria(self, random_matrix):
        with pytest.raises(ConfigurationError):
            WalkForwardEngine(random_matrix, is_n=10, oos1_n=5, criteria=[])
