"""
Pytest configuration and fixtures for the Market Chooser tests.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to Python path so imports work
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from market_chooser.data.price_matrix import PriceMatrix


def random_walk_matrix(n_cases: int, n_markets: int, seed: int = 0) -> PriceMatrix:
    """Log-price random walks with slightly different drifts."""
    rng = np.random.default_rng(seed)
    drifts = np.linspace(-0.0005, 0.001, n_markets)
    steps = rng.normal(drifts, 0.01, size=(n_cases, n_markets))
    log_prices = np.log(100.0) + np.cumsum(steps, axis=0)
    dates = pd.bdate_range("2015-01-01", periods=n_cases)
    return PriceMatrix.from_log_prices(
        log_prices, names=[f"MKT{i}" for i in range(n_markets)], dates=dates
    )


def write_market_file(path: Path, closes, start: str = "2020-01-01", skip=()) -> Path:
    """Write a 'YYYYMMDD open high low close' history, omitting dates in skip."""
    dates = pd.bdate_range(start, periods=len(closes))
    lines = []
    for i, (date, close) in enumerate(zip(dates, closes)):
        if i in skip:
            continue
        lines.append(f"{date:%Y%m%d} {close:.4f} {close * 1.01:.4f} {close * 0.99:.4f} {close:.4f}")
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture(scope="session")
def random_matrix():
    """Three random-walk markets, 500 aligned days."""
    return random_walk_matrix(500, 3, seed=7)


@pytest.fixture(scope="session")
def dominant_matrix():
    """
    Two markets where A rises every day and B falls every day,
    so A wins under every criterion on every window.
    """
    n_cases = 120
    t = np.arange(n_cases)
    steps_a = 0.01 + 0.005 * np.sin(t)
    steps_b = -0.01 - 0.005 * np.cos(t)
    log_prices = np.column_stack([np.cumsum(steps_a), np.cumsum(steps_b)])
    return PriceMatrix.from_log_prices(log_prices, names=["A", "B"])


@pytest.fixture
def market_files(tmp_path):
    """
    Three market history files plus a list file naming them.

    Market DEF is missing two dates that the others have, so the aligned
    calendar is two days shorter than each file.
    """
    rng = np.random.default_rng(11)
    n_days = 160
    paths = []
    for name, skip in (("ABC", ()), ("DEF", (10, 20)), ("GHI", ())):
        closes = 50.0 * np.exp(np.cumsum(rng.normal(0.0003, 0.01, n_days)))
        paths.append(write_market_file(tmp_path / f"{name}.txt", closes, skip=skip))

    list_file = tmp_path / "markets.txt"
    list_file.write_text("\n".join(p.name for p in paths) + "\n")
    return list_file
