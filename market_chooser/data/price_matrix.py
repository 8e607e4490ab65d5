"""
Price Matrix - calendar-aligned log prices of competing markets.

One row per common trading date (strictly increasing), one column per
market. The underlying array is flagged read-only once constructed, so the
walk-forward engine and the reports can share it freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from market_chooser.exceptions import MarketDataError


@dataclass(frozen=True, eq=False)
class PriceMatrix:
    """Immutable matrix of natural-log closing prices."""

    log_prices: np.ndarray  # shape (n_cases, n_markets)
    names: tuple
    dates: Optional[pd.DatetimeIndex] = None

    def __post_init__(self):
        prices = np.array(self.log_prices, dtype=float)
        if prices.ndim != 2:
            raise MarketDataError(f"Price matrix must be 2-D, got shape {prices.shape}")
        if prices.shape[0] == 0 or prices.shape[1] == 0:
            raise MarketDataError(f"Price matrix is empty (shape {prices.shape})")
        if not np.all(np.isfinite(prices)):
            raise MarketDataError("Price matrix contains non-finite log prices")
        if len(self.names) != prices.shape[1]:
            raise MarketDataError(
                f"Got {len(self.names)} market names for {prices.shape[1]} columns"
            )
        if self.dates is not None:
            if len(self.dates) != prices.shape[0]:
                raise MarketDataError(
                    f"Got {len(self.dates)} dates for {prices.shape[0]} rows"
                )
            if not self.dates.is_monotonic_increasing or not self.dates.is_unique:
                raise MarketDataError("Price matrix dates must be strictly increasing")

        prices.flags.writeable = False
        object.__setattr__(self, "log_prices", prices)
        object.__setattr__(self, "names", tuple(str(name) for name in self.names))

    @property
    def n_cases(self) -> int:
        return self.log_prices.shape[0]

    @property
    def n_markets(self) -> int:
        return self.log_prices.shape[1]

    def market(self, imarket: int) -> np.ndarray:
        """Read-only log-price column of one market."""
        return self.log_prices[:, imarket]

    def to_frame(self) -> pd.DataFrame:
        """Log prices as a DataFrame (dates x market names)."""
        return pd.DataFrame(self.log_prices, index=self.dates, columns=list(self.names))

    @classmethod
    def from_log_prices(
        cls,
        log_prices: np.ndarray,
        names: Optional[Sequence[str]] = None,
        dates: Optional[Sequence] = None,
    ) -> "PriceMatrix":
        """
        Wrap an (n_cases, n_markets) array of log prices.

        Args:
            log_prices: Natural-log prices, one column per market
            names: Market names (default: MKT0, MKT1, ...)
            dates: Optional trading dates, one per row
        """
        log_prices = np.asarray(log_prices, dtype=float)
        if names is None:
            n_markets = log_prices.shape[1] if log_prices.ndim == 2 else 0
            names = [f"MKT{i}" for i in range(n_markets)]
        index = pd.DatetimeIndex(dates) if dates is not None else None
        return cls(log_prices=log_prices, names=tuple(names), dates=index)

    @classmethod
    def from_closes(cls, closes: pd.DataFrame) -> "PriceMatrix":
        """
        Build from aligned closing prices (dates x markets), taking natural logs.

        Raises:
            MarketDataError: If any close is not strictly positive
        """
        values = closes.to_numpy(dtype=float)
        if not np.all(values > 0.0):
            bad: List[str] = [str(c) for c in closes.columns[~(values > 0.0).all(axis=0)]]
            raise MarketDataError(f"Non-positive closing prices in markets: {', '.join(bad)}")
        return cls(
            log_prices=np.log(values),
            names=tuple(closes.columns),
            dates=pd.DatetimeIndex(closes.index),
        )
