"""
Подготовка производных рядов для бэктеста пары.

Из двух выровненных ценовых рядов строятся spread, rolling z-score и
rolling корреляция доходностей. Все ряды выровнены по дню, в котором
торгуются цены: z-score и корреляция дня ``t`` используют только данные
до ``t`` включительно.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .math_utils import (
    linear_regression,
    rolling_correlation_numba,
    rolling_zscore_numba,
)

logger = logging.getLogger(__name__)


class InsufficientDataError(ValueError):
    """Price history is too short for the rolling window."""


@dataclass(frozen=True)
class DerivedSeries:
    """Day-aligned inputs of the simulation loop.

    ``zscore``, ``correlation``, ``prices_a`` and ``prices_b`` all have
    length ``N - window``; element ``d`` belongs to raw day
    ``start_day + d``.
    """
    hedge_ratio: float
    intercept: float
    window: int
    spread: np.ndarray
    returns_a: np.ndarray
    returns_b: np.ndarray
    zscore: np.ndarray
    correlation: np.ndarray
    prices_a: np.ndarray
    prices_b: np.ndarray
    start_day: int

    @property
    def n_days(self) -> int:
        return int(self.zscore.shape[0])


def _as_price_array(prices, name: str) -> np.ndarray:
    values = np.asarray(prices, dtype=np.float64)
    if values.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional")
    if not np.all(np.isfinite(values)):
        raise ValueError(f"{name} contains non-finite prices")
    if np.any(values <= 0):
        raise ValueError(f"{name} contains non-positive prices")
    return values


def simple_returns(prices: np.ndarray) -> np.ndarray:
    """``(p[t] - p[t-1]) / p[t-1]``; one element shorter than ``prices``."""
    prices = np.asarray(prices, dtype=np.float64)
    return (prices[1:] - prices[:-1]) / prices[:-1]


def log_prices(prices: np.ndarray) -> np.ndarray:
    return np.log(np.asarray(prices, dtype=np.float64))


def prepare_pair_series(prices_a, prices_b, window: int) -> DerivedSeries:
    """Compute hedge ratio, spread, z-scores and correlations for a pair.

    Parameters
    ----------
    prices_a, prices_b : array-like
        Aligned positive prices of equal length ``N``.
    window : int
        Rolling window ``W`` used for both the z-score and the correlation.

    Returns
    -------
    DerivedSeries
        Statistics for simulation days ``W .. N-1``.

    Raises
    ------
    InsufficientDataError
        If ``N <= W``: no day would have both statistics defined.
    """
    if window < 2:
        raise ValueError(f"window must be >= 2, got {window}")

    a = _as_price_array(prices_a, "prices_a")
    b = _as_price_array(prices_b, "prices_b")
    if a.shape[0] != b.shape[0]:
        raise ValueError(f"Price series length mismatch: {a.shape[0]} != {b.shape[0]}")

    n = a.shape[0]
    if n <= window:
        raise InsufficientDataError(
            f"Need more than {window} prices for window={window}, got {n}"
        )

    # 1. Хедж-коэффициент оценивается один раз на всей истории
    regression = linear_regression(a, b)
    hedge_ratio = regression.slope

    # 2. Лог-спред
    spread = log_prices(a) - hedge_ratio * log_prices(b)

    # 3. Rolling z-score, первый валидный индекс W-1
    zscores = rolling_zscore_numba(spread, window)

    # 4. Доходности и rolling корреляция; returns[k] относится к дню k+1
    returns_a = simple_returns(a)
    returns_b = simple_returns(b)
    corr_by_return = rolling_correlation_numba(returns_a, returns_b, window)
    correlations = np.full(n, np.nan)
    correlations[1:] = corr_by_return

    # 5. Оба показателя определены начиная с дня W
    start = window
    derived = DerivedSeries(
        hedge_ratio=hedge_ratio,
        intercept=regression.intercept,
        window=window,
        spread=spread,
        returns_a=returns_a,
        returns_b=returns_b,
        zscore=zscores[start:],
        correlation=correlations[start:],
        prices_a=a[start:],
        prices_b=b[start:],
        start_day=start,
    )
    logger.debug(
        "Prepared %d simulation days (window=%d, hedge_ratio=%.4f)",
        derived.n_days, window, hedge_ratio,
    )
    return derived
