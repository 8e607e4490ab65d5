"""
Date Alignment
Merges heterogeneous market histories onto a common trading calendar.
"""

from typing import Mapping

import pandas as pd

from market_chooser.data.price_matrix import PriceMatrix
from market_chooser.exceptions import MarketDataError
from market_chooser.logging_config import get_logger

logger = get_logger(__name__)


def align_closes(markets: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    """
    Keep only the dates on which every market has a record.

    Args:
        markets: Mapping of market name -> DataFrame with a 'close' column,
            indexed by strictly increasing dates

    Returns:
        DataFrame of closing prices (common dates x markets), ascending

    Raises:
        MarketDataError: If no markets are given or no date is common to all
    """
    if not markets:
        raise MarketDataError("No markets to align")

    closes = pd.concat(
        {name: frame["close"] for name, frame in markets.items()},
        axis=1,
        join="inner",
    ).sort_index()

    if closes.empty:
        raise MarketDataError("Markets have no trading dates in common")

    assert closes.notna().all().all()

    logger.info(
        "Merged database has %d records from date %s to %s",
        len(closes), closes.index[0].strftime("%Y%m%d"), closes.index[-1].strftime("%Y%m%d"),
    )
    return closes


def build_price_matrix(markets: Mapping[str, pd.DataFrame]) -> PriceMatrix:
    """Align market histories and convert closes to a log-price matrix."""
    return PriceMatrix.from_closes(align_closes(markets))
