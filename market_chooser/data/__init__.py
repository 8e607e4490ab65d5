"""Market history ingestion and calendar alignment."""

from market_chooser.data.alignment import align_closes, build_price_matrix
from market_chooser.data.market_loader import load_market_file, load_markets, read_market_list
from market_chooser.data.price_matrix import PriceMatrix

__all__ = [
    "PriceMatrix",
    "align_closes",
    "build_price_matrix",
    "load_market_file",
    "load_markets",
    "read_market_list",
]
