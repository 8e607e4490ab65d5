"""
Market History Loader
Reads competing market histories from plain-text files.

A market list file names one market history file per line. Each history
file holds one record per line:

    YYYYMMDD open [high [low [close]]]

Fields are separated by spaces, tabs or commas ('/' is also accepted
between price fields). Missing high, low or close default to the open.
The market name is the history file's stem.
"""

import re
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pandas as pd

from market_chooser.constants import (
    DATE_FIELD_DELIMITERS,
    MAX_VALID_YEAR,
    MIN_VALID_YEAR,
    PRICE_FIELD_DELIMITERS,
)
from market_chooser.exceptions import MarketDataError
from market_chooser.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

_DATE_SPLIT = re.compile(f"[{re.escape(DATE_FIELD_DELIMITERS)}]+")
_PRICE_SPLIT = re.compile(f"[{re.escape(PRICE_FIELD_DELIMITERS)}]+")

OHLC_COLUMNS = ["open", "high", "low", "close"]


def market_name_from_path(path: PathLike) -> str:
    """Market name is the file name without directory or final extension."""
    path = Path(path)
    if not path.suffix:
        raise MarketDataError(f"Market file name ({path}) is not legal: it has no extension")
    return path.stem


def _parse_date(token: str, path: Path, line_number: int) -> pd.Timestamp:
    """Convert a YYYYMMDD token to a Timestamp, validating its parts."""
    try:
        full_date = int(token)
    except ValueError:
        raise MarketDataError(
            f"Invalid date '{token}' in market file {path} line {line_number}"
        ) from None

    year, rest = divmod(full_date, 10000)
    month, day = divmod(rest, 100)
    if not (1 <= month <= 12 and 1 <= day <= 31 and MIN_VALID_YEAR <= year <= MAX_VALID_YEAR):
        raise MarketDataError(f"Invalid date {full_date} in market file {path} line {line_number}")

    try:
        return pd.Timestamp(year=year, month=month, day=day)
    except ValueError:
        raise MarketDataError(
            f"Invalid date {full_date} in market file {path} line {line_number}"
        ) from None


def _parse_record(line: str, path: Path, line_number: int) -> Tuple[pd.Timestamp, List[float]]:
    """Parse one 'date open [high [low [close]]]' record."""
    stripped = line.strip(DATE_FIELD_DELIMITERS + "\r\n")
    parts = _DATE_SPLIT.split(stripped, maxsplit=1)
    date = _parse_date(parts[0], path, line_number)

    price_text = parts[1].strip(PRICE_FIELD_DELIMITERS) if len(parts) > 1 else ""
    if not price_text:
        raise MarketDataError(f"Missing open price in market file {path} line {line_number}")

    try:
        prices = [float(tok) for tok in _PRICE_SPLIT.split(price_text)[:4]]
    except ValueError:
        raise MarketDataError(
            f"Invalid price in market file {path} line {line_number}: {price_text!r}"
        ) from None

    # high, low and close default to the open
    prices += [prices[0]] * (4 - len(prices))
    open_, high, low, close = prices

    if high < open_ or high < close or low > open_ or low > close:
        raise MarketDataError(
            f"Open or close outside high/low bounds in market file {path} line {line_number}"
        )

    return date, prices


def load_market_file(path: PathLike) -> pd.DataFrame:
    """
    Read one market history file.

    Args:
        path: Market history file

    Returns:
        DataFrame indexed by date with open/high/low/close columns

    Raises:
        MarketDataError: On unreadable files or malformed records
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise MarketDataError(f"Cannot open market file {path}: {e}") from e

    dates: List[pd.Timestamp] = []
    rows: List[List[float]] = []
    prior_date = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        if len(line.strip()) == 0:
            break  # Normal end of file

        date, prices = _parse_record(line, path, line_number)
        if prior_date is not None and date <= prior_date:
            raise MarketDataError(
                f"Date failed to increase in market file {path} line {line_number}"
            )
        prior_date = date

        dates.append(date)
        rows.append(prices)

    if not rows:
        raise MarketDataError(f"Cannot read market file {path}: no records")

    frame = pd.DataFrame(rows, index=pd.DatetimeIndex(dates, name="date"), columns=OHLC_COLUMNS)

    logger.info(
        "Market file %s had %d records from date %s to %s",
        path, len(frame), frame.index[0].strftime("%Y%m%d"), frame.index[-1].strftime("%Y%m%d"),
    )
    return frame


def _resolve_market_path(entry: str, list_dir: Path) -> Path:
    """Resolve a list entry against the cwd first, then the list file's directory."""
    candidate = Path(entry)
    if candidate.is_absolute() or candidate.exists():
        return candidate
    return list_dir / candidate


def read_market_list(list_file: PathLike) -> List[Path]:
    """
    Read the market list file.

    Returns:
        Market history paths, in list order

    Raises:
        MarketDataError: If the list cannot be read or names no markets
    """
    list_file = Path(list_file)
    try:
        lines = list_file.read_text().splitlines()
    except OSError as e:
        raise MarketDataError(f"Cannot read list file {list_file}: {e}") from e

    paths = [
        _resolve_market_path(line.strip(), list_file.parent)
        for line in lines
        if line.strip()
    ]
    if not paths:
        raise MarketDataError(f"List file {list_file} names no market files")
    return paths


def load_markets(list_file: PathLike) -> Dict[str, pd.DataFrame]:
    """
    Load every market named in a list file.

    Args:
        list_file: Text file with one market history path per line

    Returns:
        Ordered mapping of market name -> OHLC DataFrame

    Raises:
        MarketDataError: On any unreadable or malformed market, or duplicate names
    """
    markets: Dict[str, pd.DataFrame] = {}
    for path in read_market_list(list_file):
        name = market_name_from_path(path)
        if name in markets:
            raise MarketDataError(f"Duplicate market name '{name}' ({path})")
        logger.debug("Reading market file %s", path)
        markets[name] = load_market_file(path)

    logger.info("Loaded %d markets from %s", len(markets), list_file)
    return markets
