"""Loading of daily price files for a single pair."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

PRICE_KEYWORDS = ("close", "price")

Source = Union[str, Path]


class DataLoadError(ValueError):
    """A price source could not be read or holds no usable prices."""


def find_price_column(columns) -> str:
    """Return the first column mentioning close/price, else the last column."""
    columns = [str(col) for col in columns]
    if not columns:
        raise DataLoadError("Price file has no columns")
    for col in columns:
        lowered = col.strip().lower()
        if any(keyword in lowered for keyword in PRICE_KEYWORDS):
            return col
    return columns[-1]


def load_price_series(source: Source, column: str | None = None) -> pd.Series:
    """Read one price series from a CSV path or URL.

    Parameters
    ----------
    source : str or Path
        Local path or URL understood by ``pandas.read_csv``.
    column : str, optional
        Explicit price column. Auto-detected when omitted.

    Returns
    -------
    pd.Series
        Prices in file order with non-numeric rows dropped, reindexed from 0.
    """
    try:
        frame = pd.read_csv(source)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Failed to read prices from {source}: {exc}") from exc

    frame.columns = [str(col).strip() for col in frame.columns]
    if column is None:
        column = find_price_column(frame.columns)
    elif column not in frame.columns:
        raise DataLoadError(f"Column '{column}' not found in {source}")

    prices = pd.to_numeric(frame[column], errors="coerce").dropna()
    prices = prices[prices > 0].reset_index(drop=True)
    if prices.empty:
        raise DataLoadError(f"No numeric prices in column '{column}' of {source}")

    dropped = len(frame) - len(prices)
    if dropped:
        logger.warning(f"Dropped {dropped} non-numeric or non-positive rows from {source}")
    logger.info(f"Loaded {len(prices)} prices from {source} (column '{column}')")
    return prices.rename(column)


def align_price_series(prices_a, prices_b) -> Tuple[np.ndarray, np.ndarray]:
    """Truncate both series to the shorter length."""
    a = np.asarray(prices_a, dtype=float)
    b = np.asarray(prices_b, dtype=float)
    length = min(a.shape[0], b.shape[0])
    if a.shape[0] != b.shape[0]:
        logger.info(f"Aligning series of lengths {a.shape[0]} and {b.shape[0]} to {length}")
    return a[:length], b[:length]


def load_pair(
    source_a: Source,
    source_b: Source,
    column_a: str | None = None,
    column_b: str | None = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Load and align the two legs of a pair."""
    prices_a = load_price_series(source_a, column_a)
    prices_b = load_price_series(source_b, column_b)
    return align_price_series(prices_a.to_numpy(), prices_b.to_numpy())
