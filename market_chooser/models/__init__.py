"""Market-selection criteria."""

from market_chooser.models.criteria import (
    Criterion,
    N_CRITERIA,
    criterion,
    profit_factor,
    sharpe_ratio,
    total_return,
)

__all__ = [
    "Criterion",
    "N_CRITERIA",
    "criterion",
    "profit_factor",
    "sharpe_ratio",
    "total_return",
]
